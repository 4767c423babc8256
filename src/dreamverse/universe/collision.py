"""Bounded force relaxation for expanded stars.

Positions, velocities and collision radii live in numpy arrays indexed by
node position (the arena); links are stored as index pairs. Each tick applies,
in order: many-body repulsion, centering, collision avoidance and link
springs, then integrates velocities with decay. A fixed number of ticks runs
before the first paint, so convergence is deterministic and needs no timers.
"""

import logging
from typing import Iterator

import numpy as np

from dreamverse.config import settings
from dreamverse.models import GraphLink, UniverseNode
from dreamverse.universe.geometry import canvas_center, collide_radius, is_valid_canvas

logger = logging.getLogger(__name__)

JIGGLE_SCALE = 1e-6


class Simulation:
    """A single stoppable relaxation run over a working copy of the nodes."""

    def __init__(
        self,
        nodes: list[UniverseNode],
        links: list[GraphLink],
        width: float,
        height: float,
        *,
        charge_strength: float,
        link_distance: float,
        link_strength: float,
        collide_base: float,
        collide_per_sqrt_count: float,
        alpha_decay: float,
        alpha_min: float,
        velocity_decay: float,
        overlap_tolerance: float,
        max_overlap_passes: int,
        seed: int,
    ) -> None:
        self.nodes = [n.copy() for n in nodes]
        self.center = np.array(canvas_center(width, height), dtype=float)
        self.charge_strength = charge_strength
        self.link_distance = link_distance
        self.link_strength = link_strength
        self.alpha_decay = alpha_decay
        self.alpha_min = alpha_min
        self.velocity_decay = velocity_decay
        self.overlap_tolerance = overlap_tolerance
        self.max_overlap_passes = max_overlap_passes

        self.alpha = 1.0
        self.steps = 0
        self._stopped = False
        self._rng = np.random.default_rng(seed)

        count = len(self.nodes)
        self.positions = np.zeros((count, 2), dtype=float)
        for i, node in enumerate(self.nodes):
            self.positions[i, 0] = node.x if node.x is not None else self.center[0]
            self.positions[i, 1] = node.y if node.y is not None else self.center[1]
        self.velocities = np.zeros((count, 2), dtype=float)
        self.radii = np.array(
            [collide_radius(n.count, collide_base, collide_per_sqrt_count) for n in self.nodes],
            dtype=float,
        )

        index = {node.id: i for i, node in enumerate(self.nodes)}
        pairs = []
        for link in links:
            source = index.get(link.source)
            target = index.get(link.target)
            # Links leaving the expanded set take no part in this run
            if source is None or target is None or source == target:
                continue
            pairs.append((source, target))
        self.link_pairs = pairs

        degree = np.zeros(count, dtype=float)
        for source, target in pairs:
            degree[source] += 1
            degree[target] += 1
        self.link_bias = [
            degree[source] / (degree[source] + degree[target]) for source, target in pairs
        ]

        self._separate_coincident()

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    @property
    def is_converged(self) -> bool:
        return self.alpha < self.alpha_min

    def stop(self) -> None:
        """Halt the run; later ticks are ignored and positions stay as they are."""
        if not self._stopped:
            logger.debug(f"Simulation stopped after {self.steps} steps")
        self._stopped = True

    def tick(self, steps: int = 1) -> int:
        """Advance up to `steps` ticks. Returns the number actually run."""
        done = 0
        for _ in range(steps):
            if self._stopped or not len(self.nodes):
                break
            self.alpha += (0.0 - self.alpha) * self.alpha_decay
            self._apply_charge()
            self._apply_center()
            self._apply_collide()
            self._apply_links()
            self.velocities *= 1.0 - self.velocity_decay
            self.positions += self.velocities
            self.steps += 1
            done += 1
        return done

    def warm_up(self, steps: int) -> None:
        """Run synchronous ticks before the first paint."""
        ran = self.tick(steps)
        logger.debug(f"Warm-up ran {ran} steps for {len(self.nodes)} nodes, alpha={self.alpha:.4f}")

    def frames(self, steps: int) -> Iterator[list[UniverseNode]]:
        """Yield one snapshot per tick for the animated settle.

        Ends early once the run converges or is stopped.
        """
        for _ in range(steps):
            if self._stopped or self.is_converged:
                return
            if not self.tick():
                return
            yield self.snapshot()

    def resolve_overlaps(self) -> int:
        """Push overlapping pairs apart until every pair clears its radii.

        Each pass finds all overlapping pairs at once, then separates them one
        pair at a time against the latest positions. Passes stop when no pair
        overlaps, or after max(max_overlap_passes, 4 * node count) passes.

        Returns:
            Number of passes performed
        """
        count = len(self.nodes)
        if count < 2:
            return 0

        upper = np.triu(np.ones((count, count), dtype=bool), k=1)
        rsum = self.radii[:, None] + self.radii[None, :]
        r2 = self.radii ** 2
        slack = self.overlap_tolerance * 0.1
        limit = max(self.max_overlap_passes, 4 * count)

        passes = 0
        while passes < limit:
            pairs = np.argwhere((self._distances() < rsum - slack) & upper)
            if not len(pairs):
                break
            for i, j in pairs:
                self._separate_pair(int(i), int(j), r2, float(rsum[i, j]), slack)
            passes += 1
        else:
            remaining = int(((self._distances() < rsum - slack) & upper).sum())
            if remaining:
                logger.warning(f"{remaining} overlapping pairs remain after {passes} passes")

        if passes:
            logger.debug(f"Resolved overlaps in {passes} passes")
        return passes

    def snapshot(self) -> list[UniverseNode]:
        """Copies of the nodes carrying the current positions."""
        result = []
        for i, node in enumerate(self.nodes):
            x, y = self.positions[i]
            if not (np.isfinite(x) and np.isfinite(y)):
                x, y = self.center
            result.append(node.copy(x=float(x), y=float(y)))
        return result

    def _distances(self) -> np.ndarray:
        diff = self.positions[:, None, :] - self.positions[None, :, :]
        return np.sqrt((diff ** 2).sum(axis=-1))

    def _separate_pair(self, i: int, j: int, r2: np.ndarray, needed: float, slack: float) -> None:
        delta = self.positions[i] - self.positions[j]
        dist = float(np.hypot(delta[0], delta[1]))
        # An earlier push in the same pass may already have cleared this pair
        if dist >= needed - slack:
            return
        if dist == 0:
            delta = self._rng.uniform(-1.0, 1.0, size=2) * JIGGLE_SCALE
            dist = float(np.hypot(delta[0], delta[1]))
        shift = delta * ((needed + slack - dist) / dist)
        total = r2[i] + r2[j]
        self.positions[i] += shift * (r2[j] / total)
        self.positions[j] -= shift * (r2[i] / total)

    def _separate_coincident(self) -> None:
        if len(self.nodes) < 2:
            return
        _, first_index, inverse = np.unique(
            self.positions, axis=0, return_index=True, return_inverse=True
        )
        inverse = np.asarray(inverse).reshape(-1)
        for i in range(len(self.nodes)):
            if first_index[inverse[i]] != i:
                self.positions[i] += self._rng.uniform(-1.0, 1.0, size=2)

    def _fix_coincident(
        self, diff: np.ndarray, dist: np.ndarray, mask: np.ndarray
    ) -> tuple[np.ndarray, np.ndarray]:
        coincident = mask & (dist == 0)
        if coincident.any():
            diff = diff.copy()
            jitter = self._rng.uniform(-1.0, 1.0, size=(int(coincident.sum()), 2)) * JIGGLE_SCALE
            diff[coincident] = jitter
            dist = np.sqrt((diff ** 2).sum(axis=-1))
        return diff, dist

    def _apply_charge(self) -> None:
        # diff[i, j] points from node i to node j
        diff = self.positions[None, :, :] - self.positions[:, None, :]
        dist2 = (diff ** 2).sum(axis=-1)
        np.fill_diagonal(dist2, np.inf)
        dist2 = np.maximum(dist2, 1.0)
        weight = self.charge_strength * self.alpha / dist2
        self.velocities += (diff * weight[:, :, None]).sum(axis=1)

    def _apply_center(self) -> None:
        shift = self.positions.mean(axis=0) - self.center
        self.positions -= shift

    def _apply_collide(self) -> None:
        count = len(self.nodes)
        if count < 2:
            return
        predicted = self.positions + self.velocities
        # diff[i, j] points from node j to node i
        diff = predicted[:, None, :] - predicted[None, :, :]
        dist = np.sqrt((diff ** 2).sum(axis=-1))
        rsum = self.radii[:, None] + self.radii[None, :]
        mask = (dist < rsum) & ~np.eye(count, dtype=bool)
        if not mask.any():
            return
        diff, dist = self._fix_coincident(diff, dist, mask)
        factor = np.where(mask, (rsum - dist) / np.where(dist > 0, dist, 1.0), 0.0)
        r2 = self.radii ** 2
        share = r2[None, :] / (r2[:, None] + r2[None, :])
        self.velocities += (diff * (factor * share)[:, :, None]).sum(axis=1)

    def _apply_links(self) -> None:
        for (source, target), bias in zip(self.link_pairs, self.link_bias):
            delta = (
                self.positions[target] + self.velocities[target]
                - self.positions[source] - self.velocities[source]
            )
            length = float(np.hypot(delta[0], delta[1]))
            if length == 0:
                delta = self._rng.uniform(-1.0, 1.0, size=2) * JIGGLE_SCALE
                length = float(np.hypot(delta[0], delta[1]))
            pull = (length - self.link_distance) / length * self.alpha * self.link_strength
            delta = delta * pull
            self.velocities[target] -= delta * bias
            self.velocities[source] += delta * (1 - bias)


class CollisionSolver:
    """
    Removes overlaps among expanded stars and pulls linked stars together.

    Forces:
    - Pairwise repulsion (many-body, negative strength)
    - Centering toward the canvas middle
    - Collision avoidance with radius sqrt(count) * 5 + 25
    - Springs along links whose endpoints are both expanded
    """

    def __init__(
        self,
        charge_strength: float | None = None,
        link_distance: float | None = None,
        link_strength: float | None = None,
        collide_base: float | None = None,
        collide_per_sqrt_count: float | None = None,
        alpha_decay: float | None = None,
        alpha_min: float | None = None,
        velocity_decay: float | None = None,
        warmup_steps: int | None = None,
        settle_steps: int | None = None,
        overlap_tolerance: float | None = None,
        max_overlap_passes: int | None = None,
        seed: int | None = None,
    ) -> None:
        def pick(value, default):
            return default if value is None else value

        self.charge_strength = pick(charge_strength, settings.solver_charge_strength)
        self.link_distance = pick(link_distance, settings.solver_link_distance)
        self.link_strength = pick(link_strength, settings.solver_link_strength)
        self.collide_base = pick(collide_base, settings.solver_collide_base)
        self.collide_per_sqrt_count = pick(collide_per_sqrt_count, settings.solver_collide_per_sqrt_count)
        self.alpha_decay = pick(alpha_decay, settings.solver_alpha_decay)
        self.alpha_min = pick(alpha_min, settings.solver_alpha_min)
        self.velocity_decay = pick(velocity_decay, settings.solver_velocity_decay)
        self.warmup_steps = pick(warmup_steps, settings.solver_warmup_steps)
        self.settle_steps = pick(settle_steps, settings.solver_settle_steps)
        self.overlap_tolerance = pick(overlap_tolerance, settings.solver_overlap_tolerance)
        self.max_overlap_passes = pick(max_overlap_passes, settings.solver_max_overlap_passes)
        self.seed = pick(seed, settings.solver_seed)

    def radius_for(self, node: UniverseNode) -> float:
        return collide_radius(node.count, self.collide_base, self.collide_per_sqrt_count)

    def start(
        self,
        nodes: list[UniverseNode],
        links: list[GraphLink],
        width: float,
        height: float,
    ) -> Simulation:
        """Create a run without ticking it."""
        return Simulation(
            nodes,
            links,
            width,
            height,
            charge_strength=self.charge_strength,
            link_distance=self.link_distance,
            link_strength=self.link_strength,
            collide_base=self.collide_base,
            collide_per_sqrt_count=self.collide_per_sqrt_count,
            alpha_decay=self.alpha_decay,
            alpha_min=self.alpha_min,
            velocity_decay=self.velocity_decay,
            overlap_tolerance=self.overlap_tolerance,
            max_overlap_passes=self.max_overlap_passes,
            seed=self.seed,
        )

    def relax(
        self,
        nodes: list[UniverseNode],
        links: list[GraphLink],
        width: float,
        height: float,
    ) -> list[UniverseNode]:
        """
        Run the warm-up and return the converged, overlap-free snapshot.

        Args:
            nodes: Expanded stars with initial positions
            links: All links; those leaving the expanded set are ignored
            width: Canvas width
            height: Canvas height

        Returns:
            Positioned copies of the nodes (inputs are not mutated)
        """
        if not nodes or not is_valid_canvas(width, height):
            return []

        simulation = self.start(nodes, links, width, height)
        simulation.warm_up(self.warmup_steps)
        simulation.resolve_overlaps()
        return simulation.snapshot()
