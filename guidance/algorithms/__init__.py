"""Direction algorithms implementations"""
from .geo_utils import GeoUtils
from .heading_resolver import HeadingResolver
from .arrow_classifier import ArrowClassifier
from .spring_animator import SpringAnimator

__all__ = ['GeoUtils', 'HeadingResolver', 'ArrowClassifier', 'SpringAnimator']
