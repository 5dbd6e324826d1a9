"""
DQN Neural Network - default Q-value network architecture.
"""
from typing import Sequence, Tuple

import torch
import torch.nn as nn


class DQNNetwork(nn.Module):
    """
    Fully connected Q-network.

    Architecture:
    - Input: state of any shape, flattened
    - Hidden: one Linear + ReLU per entry of hidden_sizes (default 24, 24)
    - Output: one linear Q-value per action
    """

    def __init__(
        self,
        input_shape: Tuple[int, ...],
        output_size: int,
        hidden_sizes: Sequence[int] = (24, 24)
    ):
        """
        Initialize the network.

        Args:
            input_shape: Shape of a single state
            output_size: Number of output Q-values (actions)
            hidden_sizes: Neurons per hidden layer
        """
        super().__init__()

        self.input_shape = tuple(input_shape)
        self.output_size = output_size
        self.hidden_sizes = tuple(hidden_sizes)

        input_size = 1
        for dim in self.input_shape:
            input_size *= dim

        layers = [nn.Flatten()]
        in_features = input_size
        for size in self.hidden_sizes:
            layers.append(nn.Linear(in_features, size))
            layers.append(nn.ReLU())
            in_features = size
        layers.append(nn.Linear(in_features, output_size))

        self.layers = nn.Sequential(*layers)

        # Initialize weights
        self._init_weights()

    def _init_weights(self):
        """Initialize weights using Xavier initialization."""
        for layer in self.layers:
            if isinstance(layer, nn.Linear):
                nn.init.xavier_uniform_(layer.weight)
                nn.init.zeros_(layer.bias)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        """
        Forward pass through the network.

        Args:
            x: Input tensor of shape (batch_size, *input_shape)

        Returns:
            Q-values tensor of shape (batch_size, output_size)
        """
        return self.layers(x)
