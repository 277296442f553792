"""Utility functions for storing and plotting transport results."""

from estream.utils.exporters import load_result_hdf5, save_result_hdf5
from estream.utils.visualization import plot_stream_history

__all__ = [
    "save_result_hdf5",
    "load_result_hdf5",
    "plot_stream_history",
]
