"""
Convergence Detection

Early-stop predicate for the orchestrator. It prevents premature stopping
by requiring a minimum number of generations, then stops the run once the
best fitness in the hall of fame stagnates.

Features:
- Minimum generation requirement to ensure adequate exploration
- Fitness improvement tracking over a configurable window (patience)
- Trend estimate over the recent history
"""

import math
from typing import List, Tuple

from ga_constants import ConvergenceConstants


class ConvergenceDetector:
    """
    Stagnation-based early stop.

    Pass an instance as GAConfig.early_stop; it is called once per
    generation with the orchestrator and records the best fitness of the
    hall of fame each time.
    """

    def __init__(self, min_generations: int = ConvergenceConstants.MIN_GENERATIONS,
                 patience: int = ConvergenceConstants.PATIENCE,
                 threshold: float = ConvergenceConstants.THRESHOLD):
        """
        Initialize the convergence detection system.

        Args:
            min_generations: Generations that must run before stopping is allowed
            patience: Number of recent generations analyzed for improvement
            threshold: Minimum absolute improvement over the window
        """
        self.min_generations = min_generations
        self.patience = patience
        self.threshold = threshold

        self.fitness_history: List[float] = []
        self.reason = ""

    def __call__(self, ga) -> bool:
        best = ga.current_best
        self.add_fitness(best.fitness if best is not None else math.inf)
        converged, self.reason = self.check_convergence(ga.generations)
        if converged:
            ga.logger.log_convergence(ga.generations, self.reason)
        return converged

    def add_fitness(self, fitness: float) -> None:
        """Add the best fitness of the current generation to the history."""
        self.fitness_history.append(fitness)

    def check_convergence(self, current_generation: int) -> Tuple[bool, str]:
        """
        Check if the run has converged based on the fitness history.

        Args:
            current_generation: Number of completed generations

        Returns:
            Tuple of (converged: bool, reason: str)
        """
        if current_generation < self.min_generations:
            return False, f"Early exploration phase (min {self.min_generations} generations required)"

        # patience generations ago is the reference point
        if len(self.fitness_history) <= self.patience:
            return False, (f"Insufficient fitness history "
                           f"({len(self.fitness_history)}/{self.patience + 1} generations)")

        reference = self.fitness_history[-self.patience - 1]
        current = self.fitness_history[-1]
        if math.isinf(reference):
            return False, "No evaluated individual yet"

        improvement = reference - current
        if improvement < self.threshold:
            return True, (f"Convergence detected: improvement of {improvement:.6f} "
                          f"over {self.patience} generations below threshold {self.threshold}")
        return False, f"Still improving: {improvement:.6f} >= {self.threshold}"

    def get_fitness_statistics(self) -> dict:
        """
        Get statistics about fitness progression.

        Returns:
            Dictionary with fitness statistics
        """
        if not self.fitness_history:
            return {
                'generations': 0,
                'best_overall': None,
                'current_fitness': None,
                'improvement_trend': None
            }

        return {
            'generations': len(self.fitness_history),
            'best_overall': min(self.fitness_history),
            'current_fitness': self.fitness_history[-1],
            'improvement_trend': self._calculate_trend()
        }

    def _calculate_trend(self) -> float:
        """
        Slope of the best fitness over the last 10 generations.

        Negative values mean the run is still improving.
        """
        window = [f for f in self.fitness_history[-10:] if not math.isinf(f)]
        n = len(window)
        if n < 2:
            return 0.0

        x_mean = (n - 1) / 2
        y_mean = sum(window) / n
        numerator = sum((x - x_mean) * (y - y_mean) for x, y in enumerate(window))
        denominator = sum((x - x_mean) ** 2 for x in range(n))
        return numerator / denominator

    def reset(self):
        """Reset the convergence detector for a new run."""
        self.fitness_history = []
        self.reason = ""

    def get_configuration(self) -> dict:
        """Get current configuration parameters."""
        return {
            'min_generations': self.min_generations,
            'patience': self.patience,
            'threshold': self.threshold
        }
