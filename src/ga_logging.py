"""
Centralized Logging System for the Genetic Algorithm Engine

Wraps the standard logging module with consistent formatting, optional
console colors and file output, plus GA-specific logging helpers.

The engine itself never installs handlers: loggers stay silent until the
application calls setup_logging().
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional


LOGGER_ROOT = "evo_islands"


class GAFormatter(logging.Formatter):
    """Custom formatter for GA logging with color support and structured output."""

    # Color codes for console output
    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
        'RESET': '\033[0m'      # Reset
    }

    def __init__(self, use_colors: bool = True, include_timestamp: bool = True):
        self.use_colors = use_colors and hasattr(sys.stdout, 'isatty') and sys.stdout.isatty()
        self.include_timestamp = include_timestamp

        if include_timestamp:
            fmt = '[%(asctime)s] %(levelname)-8s | %(name)s | %(message)s'
            datefmt = '%H:%M:%S'
        else:
            fmt = '%(levelname)-8s | %(name)s | %(message)s'
            datefmt = None

        super().__init__(fmt, datefmt)

    def format(self, record):
        if self.use_colors:
            color = self.COLORS.get(record.levelname, '')
            reset = self.COLORS['RESET']
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{reset}"

        return super().format(record)


class GALogger:
    """
    Thin wrapper around a logging.Logger with GA-specific helpers.

    Every GALogger lives under the LOGGER_ROOT hierarchy, so a single
    setup_logging() call controls the whole engine.
    """

    def __init__(self, name: str = "GA"):
        if name != LOGGER_ROOT and not name.startswith(LOGGER_ROOT + "."):
            name = f"{LOGGER_ROOT}.{name}"
        self.logger = logging.getLogger(name)
        self.log_file: Optional[str] = None

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, exception: Exception = None, **kwargs):
        """Log error message with optional exception details."""
        formatted_msg = self._format_message(message, **kwargs)
        if exception:
            formatted_msg += f" | Exception: {type(exception).__name__}: {str(exception)}"
        self.logger.error(formatted_msg)

    def critical(self, message: str, exception: Exception = None, **kwargs):
        """Log critical message with optional exception details."""
        formatted_msg = self._format_message(message, **kwargs)
        if exception:
            formatted_msg += f" | Exception: {type(exception).__name__}: {str(exception)}"
        self.logger.critical(formatted_msg)

    def _format_message(self, message: str, **kwargs) -> str:
        """Format message with optional context parameters."""
        if kwargs:
            context = " | ".join(f"{k}={v}" for k, v in kwargs.items())
            return f"{message} | {context}"
        return message

    # GA-specific logging methods
    def log_generation_start(self, generation: int, n_pops: int, pop_size: int):
        """Log generation start."""
        self.debug(f"Starting generation {generation}",
                   populations=n_pops,
                   population_size=pop_size)

    def log_generation_complete(self, generation: int, best_fitness: float,
                                time_taken: float, peak_memory: float):
        """Log generation completion."""
        self.info(f"Generation {generation} complete",
                  best_fitness=f"{best_fitness:.6f}",
                  time_taken=f"{time_taken:.2f}s",
                  peak_memory=f"{peak_memory:.2f}GB")

    def log_migration(self, generation: int, migrator_name: str, n_pops: int):
        """Log a migration round."""
        self.debug(f"Migration at generation {generation}",
                   migrator=migrator_name,
                   populations=n_pops)

    def log_early_stop(self, generation: int, reason: str = "early stop predicate"):
        """Log early termination of the generational loop."""
        self.info(f"Stopping after generation {generation}", reason=reason)

    def log_convergence(self, generation: int, reason: str):
        """Log convergence detection."""
        self.info(f"Convergence detected at generation {generation}",
                  reason=reason)

    def log_config_summary(self, config):
        """Log configuration summary."""
        self.info("GA configuration loaded",
                  populations=config.n_pops,
                  population_size=config.pop_size,
                  generations=config.n_generations,
                  hof_size=config.hof_size,
                  model=type(config.model).__name__)

    def log_parallel_processing(self, worker_count: int, task_count: int,
                                time_taken: float):
        """Log parallel processing performance."""
        self.debug("Parallel processing complete",
                   workers=worker_count,
                   tasks=task_count,
                   time_taken=f"{time_taken:.4f}s")


_loggers: Dict[str, GALogger] = {}


def get_logger(name: str = "GA") -> GALogger:
    """Get or create the GALogger registered under name."""
    if name not in _loggers:
        _loggers[name] = GALogger(name)
    return _loggers[name]


def setup_logging(level: str = "INFO", log_to_file: bool = True,
                  output_dir: str = "logs", console_colors: bool = True) -> GALogger:
    """
    Setup logging configuration for the whole engine.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Whether to log to file
        output_dir: Directory for log files
        console_colors: Whether to use colors in console output

    Returns:
        Configured root GALogger instance
    """
    root = logging.getLogger(LOGGER_ROOT)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.propagate = False

    # Clear any existing handlers
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(GAFormatter(use_colors=console_colors, include_timestamp=False))
    root.addHandler(console_handler)

    ga_logger = get_logger(LOGGER_ROOT)
    ga_logger.log_file = None

    if log_to_file:
        log_dir = Path(output_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"ga_run_{timestamp}.log"

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(GAFormatter(use_colors=False, include_timestamp=True))
        root.addHandler(file_handler)

        ga_logger.log_file = str(log_file)

    return ga_logger
