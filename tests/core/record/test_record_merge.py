# tests/core/record/test_record_merge.py
"""
Testes do merge estrutural de records.

Este módulo valida a política de merge aplicada entre um record base
(default global) e um override do mesmo tipo (pool):

- escalares: o override vence apenas quando não é vazio
- mapas: merge por chave com tombstones
- records aninhados: recursão no modo deep, substituição no modo shallow
- datetime: escalar atômico
- marcadores `<campo>_inherited`: escritos apenas com rastreamento ativo
- falhas de atribuição: `MergeError` com aplicação parcial preservada

Limites explícitos:
    - Não acessa store
    - Não valida serialização
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from scopedconfig.core.errors import MergeError, ValidationError
from scopedconfig.core.record import EmptinessPolicy, merge_into, merge_records
from tests.fixtures.records import AutoScaleRule, Cooldown, Level, Limits, Loose, Mixed, Pinned, Point, WithPoint, WithPrivate


T0 = datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc)
T1 = datetime(2026, 2, 1, 12, 30, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "base_units, override_units, expected",
    [(10, 20, 20), (10, 0, 10), (0, 7, 7), (0, 0, 0)],
)
def test_scalar_override_wins_only_when_not_empty(base_units, override_units, expected):
    merged, _ = merge_records(AutoScaleRule(max_units=base_units), AutoScaleRule(max_units=override_units))
    assert merged.max_units == expected


def test_allow_empty_turns_zero_into_override():
    """
    Com `allow_empty=True`, `0` é um override legítimo; com `False`, é vazio.
    """
    merged, overridden = merge_records(Limits(x=5), Limits(x=0), allow_empty=True)
    assert merged.x == 0
    assert overridden is True

    merged, overridden = merge_records(Limits(x=5), Limits(x=0), allow_empty=False)
    assert merged.x == 5
    assert overridden is False


def test_mapping_tombstone_removes_key():
    base = AutoScaleRule(weights={"a": 1, "b": 2})
    override = AutoScaleRule(weights={"a": 0, "c": 3})

    merged, overridden = merge_records(base, override)

    assert merged.weights == {"b": 2, "c": 3}
    assert overridden is True


def test_mapping_tombstone_for_key_absent_from_base():
    merged, _ = merge_records(AutoScaleRule(envs={"A": "1"}), AutoScaleRule(envs={"Z": ""}))
    assert merged.envs == {"A": "1"}
    assert "Z" not in merged.envs


def test_mapping_with_only_tombstones_counts_as_inherited():
    merged, overridden = merge_records(
        AutoScaleRule(envs={"A": "1", "B": "2"}),
        AutoScaleRule(envs={"A": ""}),
        track_inheritance=True,
    )
    assert merged.envs == {"B": "2"}
    assert merged.envs_inherited is True
    assert overridden is False


def test_mapping_values_are_not_shared_with_override():
    override = AutoScaleRule(envs={"A": "1"})
    merged, _ = merge_records(AutoScaleRule(), override)
    merged.envs["A"] = "changed"
    assert override.envs == {"A": "1"}


def test_inheritance_flags_reflect_origin_of_each_field():
    base = AutoScaleRule(max_units=10, pre_command="echo base")

    merged, _ = merge_records(base, AutoScaleRule(), track_inheritance=True)
    assert merged.max_units == 10
    assert merged.max_units_inherited is True

    merged, _ = merge_records(base, AutoScaleRule(max_units=20), track_inheritance=True)
    assert merged.max_units == 20
    assert merged.max_units_inherited is False
    assert merged.pre_command == "echo base"
    assert merged.pre_command_inherited is True


def test_inheritance_flags_untouched_without_tracking():
    base = AutoScaleRule(max_units=10, max_units_inherited=True)
    merged, _ = merge_records(base, AutoScaleRule(max_units=20))
    assert merged.max_units == 20
    assert merged.max_units_inherited is True
    assert merged.pre_command_inherited is False


def test_nested_record_flag_is_false_when_any_leaf_overridden():
    merged, _ = merge_records(
        AutoScaleRule(limits=Limits(x=1, y=2)),
        AutoScaleRule(limits=Limits(y=3)),
        track_inheritance=True,
    )
    assert merged.limits == Limits(x=1, y=3)
    assert merged.limits_inherited is False


def test_deep_mode_merges_nested_record_per_leaf():
    merged, _ = merge_records(AutoScaleRule(limits=Limits(x=1, y=2)), AutoScaleRule(limits=Limits(x=0, y=3)))
    assert merged.limits == Limits(x=1, y=3)


def test_shallow_mode_replaces_whole_field():
    merged, overridden = merge_records(
        AutoScaleRule(limits=Limits(x=1, y=2)),
        AutoScaleRule(limits=Limits(x=0, y=3)),
        shallow=True,
    )
    assert merged.limits == Limits(x=0, y=3)
    assert overridden is True


def test_shallow_mode_keeps_base_for_empty_field_and_ignores_flags():
    merged, _ = merge_records(
        AutoScaleRule(limits=Limits(x=1, y=2), max_units=4),
        AutoScaleRule(),
        shallow=True,
        track_inheritance=True,
    )
    assert merged.limits == Limits(x=1, y=2)
    assert merged.max_units == 4
    assert merged.max_units_inherited is False
    assert merged.limits_inherited is False


def test_all_empty_override_yields_base_unchanged():
    base = AutoScaleRule(
        enabled=True,
        max_units=10,
        scale_down_ratio=0.5,
        pre_command="echo",
        limits=Limits(x=1, y=2),
        envs={"A": "1"},
        weights={"w": 1},
        tags=["t"],
        updated_at=T0,
        level=Level.HIGH,
    )
    merged, overridden = merge_records(base, AutoScaleRule())
    assert merged == base
    assert overridden is False


def test_datetime_is_atomic_leaf():
    merged, _ = merge_records(AutoScaleRule(updated_at=T0), AutoScaleRule(updated_at=T1))
    assert merged.updated_at == T1

    merged, _ = merge_records(AutoScaleRule(updated_at=T0), AutoScaleRule(updated_at=None))
    assert merged.updated_at == T0


def test_zero_duration_and_decimal_keep_base_values():
    """
    `timedelta(0)` e `Decimal("0")` no override são vazios: a base permanece e
    nenhum campo conta como sobrescrito.
    """
    base = Cooldown(wait=timedelta(minutes=5), ratio=Decimal("1.5"))
    merged, overridden = merge_records(base, Cooldown())
    assert merged == base
    assert overridden is False

    merged, overridden = merge_records(base, Cooldown(wait=timedelta(seconds=30)))
    assert merged == Cooldown(wait=timedelta(seconds=30), ratio=Decimal("1.5"))
    assert overridden is True


def test_int_and_decimal_share_number_kind():
    merged, _ = merge_records(Loose(payload=3), Loose(payload=Decimal("2.5")))
    assert merged.payload == Decimal("2.5")


def test_duration_and_number_are_incompatible():
    with pytest.raises(MergeError) as exc:
        merge_into(Loose(payload=timedelta(minutes=1)), Loose(payload=60), policy=EmptinessPolicy())
    assert exc.value.details["path"] == "payload"


def test_nested_record_without_defaults_merges_per_leaf():
    merged, overridden = merge_records(WithPoint(point=Point(1, 2)), WithPoint(point=Point(3, 0)))
    assert merged.point == Point(3, 2)
    assert overridden is True

    merged, overridden = merge_records(WithPoint(point=Point(1, 2)), WithPoint())
    assert merged.point == Point(1, 2)
    assert overridden is False


def test_sequences_and_enums_replace_wholesale():
    merged, _ = merge_records(
        AutoScaleRule(tags=["a", "b"], level=Level.LOW),
        AutoScaleRule(tags=["c"], level=Level.HIGH),
    )
    assert merged.tags == ["c"]
    assert merged.level is Level.HIGH


def test_merge_records_does_not_mutate_inputs():
    base = AutoScaleRule(max_units=1, envs={"A": "1"})
    override = AutoScaleRule(max_units=2, envs={"B": "2"})
    merge_records(base, override, track_inheritance=True)
    assert base == AutoScaleRule(max_units=1, envs={"A": "1"})
    assert override == AutoScaleRule(max_units=2, envs={"B": "2"})


def test_merge_into_mutates_base_in_place():
    base = AutoScaleRule(max_units=1)
    overridden = merge_into(base, AutoScaleRule(pre_command="x"), policy=EmptinessPolicy())
    assert overridden is True
    assert base.pre_command == "x"
    assert base.max_units == 1


def test_private_fields_are_never_merged():
    base = WithPrivate(name="a", _cache="base")
    merge_into(base, WithPrivate(name="b", _cache="override"), policy=EmptinessPolicy())
    assert base.name == "b"
    assert base._cache == "base"


def test_unassignable_field_raises_and_keeps_partial_result():
    """
    Campo frozen não pode ser atribuído: `MergeError` aponta o caminho e os
    campos mesclados antes da falha permanecem aplicados.
    """
    base = Mixed()
    with pytest.raises(MergeError) as exc:
        merge_into(base, Mixed(label="x", pinned=Pinned(value=5), count=3), policy=EmptinessPolicy())

    assert exc.value.details["path"] == "pinned.value"
    assert base.label == "x"
    assert base.count == 0


def test_incompatible_values_raise_merge_error():
    with pytest.raises(MergeError) as exc:
        merge_into(Loose(payload="text"), Loose(payload=5), policy=EmptinessPolicy())
    assert exc.value.details["path"] == "payload"


def test_records_of_different_types_in_same_field_raise_merge_error():
    with pytest.raises(MergeError):
        merge_into(Loose(payload=Limits(x=1)), Loose(payload=Pinned(value=2)), policy=EmptinessPolicy())


def test_mapping_onto_missing_value_is_accepted():
    merged, _ = merge_records(Loose(), Loose(payload={"a": 1, "b": 0}))
    assert merged.payload == {"a": 1}


def test_top_level_type_mismatch_is_validation_error():
    with pytest.raises(ValidationError):
        merge_into(Limits(), AutoScaleRule(), policy=EmptinessPolicy())
    with pytest.raises(ValidationError):
        merge_into({"x": 1}, {"x": 2}, policy=EmptinessPolicy())
