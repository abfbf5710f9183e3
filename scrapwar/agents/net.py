"""Net — a small feed-forward convolution network in NumPy.

Images are ``(height, width, channels)`` float arrays.  The network is a
plain chain of layers; there is no training by gradient, weights are
only ever changed by the genetic algorithm in ``evolution.py``.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from numpy.typing import NDArray

if TYPE_CHECKING:
    from numpy.random import Generator


class Layer(Protocol):
    """Anything that maps one image to another."""

    def process(self, image: NDArray[np.float64]) -> NDArray[np.float64]: ...


@dataclass
class Padding:
    """Zero-pad the spatial dimensions of an image."""

    pad_w: int
    pad_h: int

    def process(self, image: NDArray[np.float64]) -> NDArray[np.float64]:
        return np.pad(
            image,
            ((self.pad_h, self.pad_h), (self.pad_w, self.pad_w), (0, 0)),
        )


@dataclass
class Conv2d:
    """Valid (unpadded) 2D convolution without bias.

    Attributes:
        weights: Kernel of shape ``(out_c, kernel_h, kernel_w, in_c)``.
    """

    weights: NDArray[np.float64]

    @classmethod
    def random(
        cls,
        kernel_w: int,
        kernel_h: int,
        in_c: int,
        out_c: int,
        rng: Generator,
    ) -> Conv2d:
        """Create a kernel with weights drawn uniformly from [-1, 1]."""
        return cls(weights=rng.uniform(-1.0, 1.0, size=(out_c, kernel_h, kernel_w, in_c)))

    def process(self, image: NDArray[np.float64]) -> NDArray[np.float64]:
        _, kernel_h, kernel_w, in_c = self.weights.shape
        if image.shape[2] != in_c:
            msg = f"expected {in_c} input channels, got {image.shape[2]}"
            raise ValueError(msg)
        windows = sliding_window_view(image, (kernel_h, kernel_w), axis=(0, 1))
        return np.einsum("yxcij,oijc->yxo", windows, self.weights)


@dataclass
class PReLU:
    """Parametric ReLU with one negative slope per channel."""

    k: NDArray[np.float64]

    @classmethod
    def random(cls, channels: int, rng: Generator) -> PReLU:
        return cls(k=rng.uniform(-1.0, 1.0, size=channels))

    def process(self, image: NDArray[np.float64]) -> NDArray[np.float64]:
        return np.where(image >= 0.0, image, image * self.k)


@dataclass
class SimpleNetwork:
    """A sequential chain of layers.

    Attributes:
        layers: Layers applied in order.
    """

    layers: list[Layer] = field(default_factory=list)

    @classmethod
    def simple_maker(
        cls,
        rng: Generator,
        *,
        conv_size: int = 5,
        in_channels: int = 4,
        inner_channels: int = 16,
        out_channels: int = 4,
        layers: int = 2,
    ) -> SimpleNetwork:
        """Build a "same"-size conv stack: conv, PReLU, ``layers`` x (conv, PReLU), conv.

        Args:
            rng: Seeded random generator for the initial weights.
            conv_size: Kernel side length; must be odd so padding keeps
                the image size.
            in_channels: Channels of the input image.
            inner_channels: Channels of every hidden layer.
            out_channels: Channels of the output image.
            layers: Number of hidden conv + PReLU blocks.

        Raises:
            ValueError: If ``conv_size`` is not a positive odd number.
        """
        if conv_size <= 0 or conv_size % 2 == 0:
            msg = f"conv_size must be a positive odd number, got {conv_size}"
            raise ValueError(msg)

        net = cls()
        net.add_central_conv(conv_size, in_channels, inner_channels, rng)
        net.layers.append(PReLU.random(inner_channels, rng))
        for _ in range(layers):
            net.add_central_conv(conv_size, inner_channels, inner_channels, rng)
            net.layers.append(PReLU.random(inner_channels, rng))
        net.add_central_conv(conv_size, inner_channels, out_channels, rng)
        return net

    def add_central_conv(
        self,
        size: int,
        in_c: int,
        out_c: int,
        rng: Generator,
    ) -> None:
        """Append padding plus a convolution that preserves image size."""
        self.layers.append(Padding(pad_w=size // 2, pad_h=size // 2))
        self.layers.append(Conv2d.random(size, size, in_c, out_c, rng))

    def process(self, image: NDArray[np.float64]) -> NDArray[np.float64]:
        """Run ``image`` through every layer and return the result."""
        out = image
        for layer in self.layers:
            out = layer.process(out)
        return out

    def parameters(self) -> list[NDArray[np.float64]]:
        """Return the trainable arrays (conv kernels and PReLU slopes)."""
        params: list[NDArray[np.float64]] = []
        for layer in self.layers:
            if isinstance(layer, Conv2d):
                params.append(layer.weights)
            elif isinstance(layer, PReLU):
                params.append(layer.k)
        return params

    def copy(self) -> SimpleNetwork:
        """Return an independent deep copy."""
        return copy.deepcopy(self)
