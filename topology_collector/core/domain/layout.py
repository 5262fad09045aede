"""
Force-directed раскладка графа топологии.

Алгоритм детерминированный (без случайности):
1. Стартовые позиции — сетка: x = (i % columns) * 200 + 100,
   y = (i // columns) * 150 + 100
2. iterations итераций:
   - отталкивание каждой пары узлов: repulsion / d²
   - притяжение по каждому ребру: d * attraction
   - pos += vel, vel *= damping
3. Нормализация в [padding, width - padding] × [padding, height - padding]

Пример:
    layout = ForceLayout()
    positions = layout.compute(["a", "b", "c"], [("a", "b")])
    positions["a"]  # (x, y)
"""

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..config_schema import LayoutConfig

GRID_STEP_X = 200.0
GRID_STEP_Y = 150.0
GRID_OFFSET = 100.0

Position = Tuple[float, float]


@dataclass
class _Body:
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0


class ForceLayout:
    """
    Раскладка узлов по силовой модели.

    Attributes:
        config: Параметры (итерации, силы, размер холста)
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig()

    def initial_positions(self, count: int) -> List[Position]:
        """Стартовая сетка."""
        columns = self.config.columns
        return [
            ((i % columns) * GRID_STEP_X + GRID_OFFSET, (i // columns) * GRID_STEP_Y + GRID_OFFSET)
            for i in range(count)
        ]

    def compute(
        self,
        node_ids: Sequence[str],
        edges: Iterable[Tuple[str, str]],
    ) -> Dict[str, Position]:
        """
        Считает координаты узлов.

        Args:
            node_ids: Узлы (порядок определяет стартовую сетку)
            edges: Рёбра (source, target); рёбра к неизвестным узлам пропускаются

        Returns:
            Dict[str, Position]: id узла → (x, y) внутри холста
        """
        if not node_ids:
            return {}

        index = {node_id: i for i, node_id in enumerate(node_ids)}
        bodies = [_Body(x, y) for x, y in self.initial_positions(len(node_ids))]
        pairs = [
            (index[source], index[target])
            for source, target in edges
            if source in index and target in index and source != target
        ]

        for _ in range(self.config.iterations):
            self._repulse(bodies)
            self._attract(bodies, pairs)
            self._move(bodies)

        return dict(zip(node_ids, self._normalize(bodies)))

    def _repulse(self, bodies: List[_Body]) -> None:
        k = self.config.repulsion
        for a in range(len(bodies)):
            for b in range(a + 1, len(bodies)):
                first, second = bodies[a], bodies[b]
                dx = second.x - first.x
                dy = second.y - first.y
                dist = max(math.hypot(dx, dy), 1.0)
                force = k / (dist * dist)
                fx = dx / dist * force
                fy = dy / dist * force
                first.vx -= fx
                first.vy -= fy
                second.vx += fx
                second.vy += fy

    def _attract(self, bodies: List[_Body], pairs: List[Tuple[int, int]]) -> None:
        k = self.config.attraction
        for a, b in pairs:
            first, second = bodies[a], bodies[b]
            dx = second.x - first.x
            dy = second.y - first.y
            dist = max(math.hypot(dx, dy), 1.0)
            force = dist * k
            fx = dx / dist * force
            fy = dy / dist * force
            first.vx += fx
            first.vy += fy
            second.vx -= fx
            second.vy -= fy

    def _move(self, bodies: List[_Body]) -> None:
        damping = self.config.damping
        for body in bodies:
            body.x += body.vx
            body.y += body.vy
            body.vx *= damping
            body.vy *= damping

    def _normalize(self, bodies: List[_Body]) -> List[Position]:
        padding = self.config.padding
        xs = _scale([b.x for b in bodies], padding, self.config.width - padding)
        ys = _scale([b.y for b in bodies], padding, self.config.height - padding)
        return list(zip(xs, ys))


def _scale(values: List[float], low: float, high: float) -> List[float]:
    # Вырожденная ось (все значения равны) → low
    lo, hi = min(values), max(values)
    span = hi - lo
    if span <= 0 or not math.isfinite(span):
        return [low for _ in values]
    return [low + (v - lo) / span * (high - low) for v in values]


def compute_layout(
    node_ids: Sequence[str],
    edges: Iterable[Tuple[str, str]],
    config: Optional[LayoutConfig] = None,
) -> Dict[str, Position]:
    """Короткая форма: ForceLayout(config).compute(node_ids, edges)."""
    return ForceLayout(config).compute(node_ids, edges)
