"""Performance profiler for JSON Mapper conversions."""

import json
import time
import psutil
import logging
from typing import Dict, Any, Optional, List
from dataclasses import dataclass
from contextlib import contextmanager


@dataclass
class PerformanceMetrics:
    """Performance metrics for one conversion operation."""
    operation_name: str
    start_time: float
    end_time: float
    duration: float
    input_size: int
    output_size: int
    memory_peak_mb: float
    memory_start_mb: float
    memory_end_mb: float
    cpu_percent: float
    succeeded: bool


class PerformanceProfiler:
    """
    Profiler for conversion operations.

    Records wall time, process memory and CPU usage for every profiled
    operation and keeps a history for later reporting.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the performance profiler.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.metrics_history: List[PerformanceMetrics] = []
        self.current_operation: Optional[str] = None
        self.start_time: Optional[float] = None
        self.start_memory: Optional[float] = None
        self.peak_memory: float = 0
        self.input_size: int = 0
        self.output_size: int = 0
        self.cpu_samples: List[float] = []

    @contextmanager
    def profile_operation(self, operation_name: str, input_size: int = 0):
        """
        Context manager for profiling operations.

        Args:
            operation_name: Name of the operation being profiled
            input_size: Size of input data in bytes
        """
        self.start_profiling(operation_name, input_size)
        succeeded = False
        try:
            yield self
            succeeded = True
        finally:
            self.stop_profiling(succeeded=succeeded)

    def start_profiling(self, operation_name: str, input_size: int = 0):
        """
        Start profiling an operation.

        Args:
            operation_name: Name of the operation
            input_size: Size of input data in bytes
        """
        self.current_operation = operation_name
        self.start_time = time.perf_counter()
        self.input_size = input_size
        self.output_size = 0

        process = psutil.Process()
        self.start_memory = process.memory_info().rss / 1024 / 1024  # MB
        self.peak_memory = self.start_memory
        self.cpu_samples = []
        process.cpu_percent()

        self.logger.debug(f"Started profiling: {operation_name}")

    def record_output(self, output_size: int):
        """Record the size in bytes of the operation's output."""
        self.output_size = output_size

    def sample_performance(self):
        """Sample current performance metrics."""
        if not self.current_operation:
            return

        try:
            process = psutil.Process()
            current_memory = process.memory_info().rss / 1024 / 1024  # MB
            self.peak_memory = max(self.peak_memory, current_memory)
            self.cpu_samples.append(process.cpu_percent())
        except psutil.Error as e:
            self.logger.warning(f"Performance sampling failed: {e}")

    def stop_profiling(self, succeeded: bool = True) -> PerformanceMetrics:
        """
        Stop profiling and return metrics.

        Args:
            succeeded: Whether the operation completed without error

        Returns:
            PerformanceMetrics object with collected data
        """
        if not self.current_operation or self.start_time is None:
            raise ValueError("No active profiling session")

        self.sample_performance()
        end_time = time.perf_counter()
        duration = end_time - self.start_time

        try:
            end_memory = psutil.Process().memory_info().rss / 1024 / 1024  # MB
        except psutil.Error:
            end_memory = self.start_memory
        avg_cpu = sum(self.cpu_samples) / len(self.cpu_samples) if self.cpu_samples else 0

        metrics = PerformanceMetrics(
            operation_name=self.current_operation,
            start_time=self.start_time,
            end_time=end_time,
            duration=duration,
            input_size=self.input_size,
            output_size=self.output_size,
            memory_peak_mb=self.peak_memory,
            memory_start_mb=self.start_memory,
            memory_end_mb=end_memory,
            cpu_percent=avg_cpu,
            succeeded=succeeded
        )

        self.metrics_history.append(metrics)

        self.logger.info(f"Performance Summary - {self.current_operation}: "
                         f"{duration * 1000:.2f}ms, memory peak {self.peak_memory:.1f} MB, "
                         f"CPU {avg_cpu:.1f}%")

        self.current_operation = None
        self.start_time = None
        self.start_memory = None

        return metrics

    def get_performance_summary(self) -> Dict[str, Any]:
        """
        Get summary of all performance metrics.

        Returns:
            Dictionary with performance summary
        """
        if not self.metrics_history:
            return {"total_operations": 0}

        count = len(self.metrics_history)
        total_duration = sum(m.duration for m in self.metrics_history)

        return {
            "total_operations": count,
            "failed_operations": sum(1 for m in self.metrics_history if not m.succeeded),
            "total_duration": total_duration,
            "average_duration": total_duration / count,
            "total_input_bytes": sum(m.input_size for m in self.metrics_history),
            "total_output_bytes": sum(m.output_size for m in self.metrics_history),
            "average_memory_peak_mb": sum(m.memory_peak_mb for m in self.metrics_history) / count,
            "average_cpu_percent": sum(m.cpu_percent for m in self.metrics_history) / count,
            "operations": [
                {
                    "name": m.operation_name,
                    "duration": m.duration,
                    "memory_peak": m.memory_peak_mb,
                    "succeeded": m.succeeded
                }
                for m in self.metrics_history
            ]
        }

    def export_metrics(self, format: str = "json") -> str:
        """
        Export performance metrics in specified format.

        Args:
            format: Export format ("json", "csv", "summary")

        Returns:
            Formatted metrics string
        """
        if format == "json":
            return json.dumps([
                {
                    "operation": m.operation_name,
                    "duration": m.duration,
                    "input_size": m.input_size,
                    "output_size": m.output_size,
                    "memory_peak_mb": m.memory_peak_mb,
                    "cpu_percent": m.cpu_percent,
                    "succeeded": m.succeeded
                }
                for m in self.metrics_history
            ], indent=2)

        elif format == "csv":
            lines = ["operation,duration,input_size,output_size,memory_peak_mb,cpu_percent,succeeded"]
            for m in self.metrics_history:
                lines.append(f"{m.operation_name},{m.duration},{m.input_size},{m.output_size},"
                             f"{m.memory_peak_mb},{m.cpu_percent},{m.succeeded}")
            return "\n".join(lines)

        elif format == "summary":
            summary = self.get_performance_summary()
            if not summary["total_operations"]:
                return "Performance Summary:\n  Total Operations: 0"
            lines = [
                "Performance Summary:",
                f"  Total Operations: {summary['total_operations']}",
                f"  Failed Operations: {summary['failed_operations']}",
                f"  Total Duration: {summary['total_duration'] * 1000:.2f}ms",
                f"  Total Input: {summary['total_input_bytes']} bytes",
                f"  Total Output: {summary['total_output_bytes']} bytes",
                f"  Average Memory Peak: {summary['average_memory_peak_mb']:.1f} MB"
            ]
            return "\n".join(lines)

        else:
            raise ValueError(f"Unsupported export format: {format}")
