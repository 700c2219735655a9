"""Simulation of a small operating system: kernel schedulers, a paging CPU and I/O devices."""

__version__ = "0.1.0"