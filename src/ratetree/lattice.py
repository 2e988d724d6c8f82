"""
Recombining binomial lattice container.

A lattice has n+1 layers; layer k holds exactly k+1 node values,
addressed as lattice[k, j] with 0 <= j <= k (j = number of up moves).
Layers are stored as read-only numpy arrays.
"""

from typing import Callable, Iterator, List, Sequence, Tuple, Union
import numpy as np
import pandas as pd


class Lattice:
    """
    Immutable recombining lattice of floats.

    Args:
        layers: Sequence of 1-D arrays, layer k of length k+1
    """

    def __init__(self, layers: Sequence[np.ndarray]):
        if len(layers) == 0:
            raise ValueError("Lattice needs at least one layer")

        frozen: List[np.ndarray] = []
        for k, layer in enumerate(layers):
            arr = np.array(layer, dtype=np.float64)
            if arr.ndim != 1 or arr.shape[0] != k + 1:
                raise ValueError(
                    f"Layer {k} must have {k + 1} nodes, got shape {arr.shape}"
                )
            arr.setflags(write=False)
            frozen.append(arr)
        self._layers = tuple(frozen)

    @classmethod
    def from_function(cls, n_steps: int, fn: Callable[[int], np.ndarray]) -> "Lattice":
        """Build a lattice whose layer k is fn(k)."""
        return cls([fn(k) for k in range(n_steps + 1)])

    @property
    def n_steps(self) -> int:
        """Number of time steps (layers - 1)."""
        return len(self._layers) - 1

    @property
    def node_count(self) -> int:
        return (self.n_steps + 1) * (self.n_steps + 2) // 2

    def layer(self, k: int) -> np.ndarray:
        """Read-only view of layer k."""
        return self._layers[k]

    def __getitem__(self, key: Union[int, Tuple[int, int]]):
        if isinstance(key, tuple):
            k, j = key
            if not 0 <= j <= k:
                raise IndexError(f"Node index {j} outside layer {k}")
            return float(self._layers[k][j])
        return self._layers[key]

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self._layers)

    def map(self, fn: Callable[[np.ndarray], np.ndarray]) -> "Lattice":
        """Apply a vectorized function to every layer."""
        return Lattice([fn(layer) for layer in self._layers])

    def to_frame(self, name: str = "value") -> pd.DataFrame:
        """
        Long-format table of the lattice.

        Returns:
            DataFrame with columns [step, node, <name>]
        """
        steps = np.concatenate([np.full(k + 1, k) for k in range(len(self._layers))])
        nodes = np.concatenate([np.arange(k + 1) for k in range(len(self._layers))])
        return pd.DataFrame({
            "step": steps,
            "node": nodes,
            name: np.concatenate(self._layers),
        })

    def __repr__(self) -> str:
        return f"Lattice(n_steps={self.n_steps})"


__all__ = ["Lattice"]
