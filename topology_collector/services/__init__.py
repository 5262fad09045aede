"""
Сервисный слой: связывает сбор, хранилище и построение графа.

- CollectionService: сбор с устройств реестра + история + сохранение
- InferenceEngine: соседи → связи между известными устройствами
- GraphBuilder: граф для визуализации
"""

from .collection_service import CollectionService
from .graph import GraphBuilder
from .inference import InferenceEngine, InferenceStats

__all__ = [
    "CollectionService",
    "GraphBuilder",
    "InferenceEngine",
    "InferenceStats",
]
