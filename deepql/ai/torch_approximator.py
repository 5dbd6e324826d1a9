"""
Torch Approximator - FunctionApproximator backed by a PyTorch network.
"""
import copy
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np
import torch
import torch.nn as nn
import torch.optim as optim

from .dqn_network import DQNNetwork
from ..core.approximator_interface import FunctionApproximator

logger = logging.getLogger(__name__)


class TorchApproximator(FunctionApproximator):
    """
    Q-value approximator using a DQNNetwork, Adam and mean squared error.
    """

    def __init__(
        self,
        input_shape: Tuple[int, ...],
        num_actions: int,
        learning_rate: float = 0.001,
        hidden_layers: Sequence[int] = (24, 24),
        device: Optional[torch.device] = None,
        network: Optional[nn.Module] = None
    ):
        """
        Initialize the approximator.

        Args:
            input_shape: Shape of a single state
            num_actions: Number of possible actions
            learning_rate: Adam learning rate
            hidden_layers: Hidden layer sizes of the default network
            device: PyTorch device to use
            network: Custom network to use instead of the default DQNNetwork
        """
        self.input_shape = tuple(input_shape)
        self.num_actions = num_actions
        self.learning_rate = learning_rate
        self.hidden_layers = tuple(hidden_layers)
        self.device = device or torch.device("cpu")

        if network is None:
            network = DQNNetwork(self.input_shape, num_actions, self.hidden_layers)
        self.network = network.to(self.device)

        self.optimizer = optim.Adam(self.network.parameters(), lr=learning_rate)
        self.criterion = nn.MSELoss()

    def _to_tensor(self, array: np.ndarray) -> torch.Tensor:
        return torch.as_tensor(np.asarray(array, dtype=np.float32), device=self.device)

    def predict(self, states: np.ndarray) -> np.ndarray:
        self.network.eval()
        with torch.no_grad():
            q_values = self.network(self._to_tensor(states))
        return q_values.cpu().numpy().astype(np.float64)

    def fit(
        self,
        states: np.ndarray,
        targets: np.ndarray,
        epochs: int = 1,
        verbose: int = 0
    ) -> None:
        states_t = self._to_tensor(states)
        targets_t = self._to_tensor(targets)

        self.network.train()
        for epoch in range(epochs):
            loss = self.criterion(self.network(states_t), targets_t)

            self.optimizer.zero_grad()
            loss.backward()
            self.optimizer.step()

            if verbose > 0:
                logger.info("Epoch %d/%d - loss: %.6f", epoch + 1, epochs, loss.item())

    def clone(self) -> "TorchApproximator":
        """Copy the network structure and weights; the optimizer starts fresh."""
        return TorchApproximator(
            self.input_shape,
            self.num_actions,
            learning_rate=self.learning_rate,
            hidden_layers=self.hidden_layers,
            device=self.device,
            network=copy.deepcopy(self.network)
        )

    def copy_parameters_to(self, other: "TorchApproximator") -> None:
        other.network.load_state_dict(self.network.state_dict())

    def soft_copy_parameters_to(self, other: "TorchApproximator", blend: float) -> None:
        with torch.no_grad():
            for target_param, param in zip(other.network.parameters(), self.network.parameters()):
                target_param.mul_(1.0 - blend).add_(param, alpha=blend)

    def get_weights(self) -> List[np.ndarray]:
        """Get copies of all parameters as numpy arrays."""
        return [p.detach().cpu().numpy().copy() for p in self.network.parameters()]

    def save(self, filepath: str) -> None:
        """
        Save network and optimizer state.

        Args:
            filepath: Path to save checkpoint
        """
        Path(filepath).parent.mkdir(parents=True, exist_ok=True)

        torch.save({
            "network_state_dict": self.network.state_dict(),
            "optimizer_state_dict": self.optimizer.state_dict(),
        }, filepath)

    def load(self, filepath: str) -> None:
        """
        Load network and optimizer state.

        Args:
            filepath: Path to load checkpoint from
        """
        checkpoint = torch.load(filepath, map_location=self.device)

        self.network.load_state_dict(checkpoint["network_state_dict"])
        self.optimizer.load_state_dict(checkpoint["optimizer_state_dict"])

    def summary(self) -> str:
        lines = [f"{type(self.network).__name__} (lr={self.learning_rate}, device={self.device})"]
        total = 0
        for name, param in self.network.named_parameters():
            count = param.numel()
            total += count
            lines.append(f"  {name:<24} {str(tuple(param.shape)):<16} {count:>10,}")
        lines.append(f"  Total parameters: {total:,}")
        return "\n".join(lines)
