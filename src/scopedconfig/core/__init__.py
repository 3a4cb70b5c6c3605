"""Núcleo do ScopedConfig: erros, records, settings e engine."""
