"""Simple visualization utilities for flux histories."""

import numpy as np
import matplotlib.pyplot as plt


def plot_stream_history(
    result,
    stream: int,
    title: str = None,
    floor: float = 1e-3,
    save_path: str = None,
):
    """Log10 colour map of one stream's flux versus time and altitude.

    Flux is shown in the stored units (#/m^2/s per stream); values
    below ``floor`` times the maximum are clipped.

    Args:
        result: TransportResult
        stream: Stream index
        title: Plot title, defaults to the stream's cosine
        floor: Dynamic range of the colour scale relative to the maximum
        save_path: If provided, save to file instead of showing
    """
    flux = result.stream_history(stream)
    peak = np.max(flux)
    vmin = np.log10(peak * floor) if peak > 0 else -1.0
    log_flux = np.log10(np.clip(flux, peak * floor if peak > 0 else 0.1, None))

    fig, ax = plt.subplots(figsize=(10, 6))

    im = ax.pcolormesh(
        result.times * 1e3,
        result.grid.z / 1e3,
        log_flux,
        shading='nearest',
        vmin=vmin,
        cmap='viridis',
    )

    plt.colorbar(im, ax=ax, label='log10 flux [#/m$^2$/s]')
    ax.set_xlabel('time [ms]')
    ax.set_ylabel('altitude [km]')
    ax.set_title(title or f'Stream {stream}, mu = {result.streams.mu[stream]:.3f}')

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
    else:
        plt.show()

    plt.close(fig)
