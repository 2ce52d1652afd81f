"""Direction finding module"""
from .direction_engine import DirectionEngine
from .target_catalog import StoreCatalog

__all__ = ['DirectionEngine', 'StoreCatalog']
