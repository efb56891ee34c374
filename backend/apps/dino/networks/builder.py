"""
Network builder for converting between JSON and PyTorch models.

This module provides the core infrastructure for:
- Building dense PyTorch controllers from JSON architecture specs
- Converting those networks back to JSON
- Exporting/importing weights as flat value records
- Cloning networks with copied (never shared) weight storage
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Sequence

import numpy as np
import torch
import torch.nn as nn


class Activation(str, Enum):
    """Activation applied after a dense layer."""

    RELU = 'relu'
    SOFTMAX = 'softmax'

    def module(self) -> nn.Module:
        if self is Activation.SOFTMAX:
            return nn.Softmax(dim=-1)
        return nn.ReLU()


@dataclass(frozen=True)
class DenseLayer:
    """
    A fully connected layer specification.

    Input width is implied by the previous layer (or the network's
    input size for the first layer).
    """

    units: int
    activation: Activation = Activation.RELU
    use_bias: bool = True

    def to_json(self) -> Dict[str, Any]:
        return {
            'units': self.units,
            'activation': self.activation.value,
            'use_bias': self.use_bias,
        }

    @classmethod
    def from_json(cls, spec: Dict[str, Any]) -> 'DenseLayer':
        if not isinstance(spec, dict):
            raise ValueError("Layer spec must be a dictionary")
        if 'units' not in spec:
            raise ValueError("Layer spec must have 'units' key")

        units = int(spec['units'])
        if units <= 0:
            raise ValueError(f"Layer units must be positive, got {units}")

        activation = spec.get('activation', Activation.RELU.value)
        try:
            activation = Activation(activation)
        except ValueError:
            raise ValueError(f"Unknown activation function: {activation}")

        return cls(
            units=units,
            activation=activation,
            use_bias=bool(spec.get('use_bias', True)),
        )


class DenseNetwork(nn.Module):
    """
    A feed-forward network built from dense layer specifications.

    Attributes:
        input_size: Width of the input feature vector.
        layer_specs: Tuple of DenseLayer, in forward order.
    """

    def __init__(self, input_size: int, layer_specs: Sequence[DenseLayer]):
        super().__init__()
        self.input_size = input_size
        self.layer_specs = tuple(layer_specs)
        self.linears = nn.ModuleList()
        self.activations = nn.ModuleList()

        width = input_size
        for spec in self.layer_specs:
            self.linears.append(nn.Linear(width, spec.units, bias=spec.use_bias))
            self.activations.append(spec.activation.module())
            width = spec.units

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        """Forward pass through all layers in order."""
        for linear, activation in zip(self.linears, self.activations):
            x = activation(linear(x))
        return x

    @property
    def output_size(self) -> int:
        if not self.layer_specs:
            return self.input_size
        return self.layer_specs[-1].units

    @property
    def architecture(self) -> Dict[str, Any]:
        return {
            'input_size': self.input_size,
            'output_size': self.output_size,
            'layers': [spec.to_json() for spec in self.layer_specs],
        }

    def topology(self) -> List[Dict[str, Any]]:
        """Per-layer (in, units, activation) summary, used for diagnostics."""
        info = []
        width = self.input_size
        for spec in self.layer_specs:
            info.append({
                'in': width,
                'units': spec.units,
                'activation': spec.activation.value,
                'use_bias': spec.use_bias,
            })
            width = spec.units
        return info


class NetworkBuilder:
    """
    Build PyTorch networks from JSON architecture specifications.

    Architecture Format:
        {
            "input_size": 4,
            "layers": [
                {"units": 4, "activation": "relu", "use_bias": true},
                {"units": 3, "activation": "softmax", "use_bias": true}
            ]
        }

    Weight Format (one record per trainable tensor, in layer order,
    kernel before bias; kernels are stored as [in, units]):
        [{"values": [...], "shape": [4, 4]}, {"values": [...], "shape": [4]}, ...]

    Example:
        builder = NetworkBuilder()
        network = builder.from_json(architecture)
        weights = builder.export_weights(network)
        builder.import_weights(weights, network)
    """

    def from_json(self, architecture: Dict[str, Any]) -> DenseNetwork:
        """
        Build a network from a JSON architecture specification.

        Args:
            architecture: Dictionary with 'input_size' and 'layers'.

        Returns:
            A DenseNetwork instance.

        Raises:
            ValueError: If architecture is invalid.
        """
        self._validate_architecture(architecture)
        layers = [DenseLayer.from_json(spec) for spec in architecture['layers']]
        return self.from_layers(int(architecture['input_size']), layers)

    def from_layers(
        self,
        input_size: int,
        layers: Sequence[DenseLayer],
    ) -> DenseNetwork:
        """Build a network from typed layer specifications."""
        if input_size <= 0:
            raise ValueError(f"input_size must be positive, got {input_size}")
        if not layers:
            raise ValueError("Architecture must have at least one layer")
        return DenseNetwork(input_size, layers)

    def _validate_architecture(self, architecture: Dict[str, Any]) -> None:
        """Validate that an architecture specification is well-formed."""
        if not isinstance(architecture, dict):
            raise ValueError("Architecture must be a dictionary")

        if 'layers' not in architecture:
            raise ValueError("Architecture must have 'layers' key")

        if not isinstance(architecture['layers'], list):
            raise ValueError("'layers' must be a list")

        if 'input_size' not in architecture:
            raise ValueError("Architecture must have 'input_size' key")

    def to_json(self, network: DenseNetwork) -> Dict[str, Any]:
        """Convert a network to its JSON architecture."""
        return network.architecture

    def weight_tensors(self, network: DenseNetwork) -> List[torch.Tensor]:
        """
        Trainable tensors in persistence order.

        Kernels are returned transposed to [in, units]; these are views,
        not copies.
        """
        tensors = []
        for linear in network.linears:
            tensors.append(linear.weight.t())
            if linear.bias is not None:
                tensors.append(linear.bias)
        return tensors

    def export_weights(self, network: DenseNetwork) -> List[Dict[str, Any]]:
        """
        Export weights as flat value records.

        Args:
            network: The network to export.

        Returns:
            List of {'values': flat list, 'shape': dims} dictionaries.
        """
        records = []
        for tensor in self.weight_tensors(network):
            array = tensor.detach().cpu().numpy()
            records.append({
                'values': array.reshape(-1).tolist(),
                'shape': list(array.shape),
            })
        return records

    def import_weights(
        self,
        records: Sequence[Dict[str, Any]],
        network: DenseNetwork,
    ) -> None:
        """
        Load weight records into a network.

        Values may be flat or nested; they are reshaped to the declared
        shape before loading.

        Raises:
            ValueError: If weights don't match network structure.
        """
        targets = self.weight_tensors(network)
        if len(records) != len(targets):
            raise ValueError(
                f"Expected {len(targets)} weight tensors, got {len(records)}"
            )

        arrays = []
        for index, (record, target) in enumerate(zip(records, targets)):
            if not isinstance(record, dict) or 'values' not in record:
                raise ValueError(f"Weight record {index} must have 'values'")
            shape = tuple(record.get('shape', target.shape))
            try:
                array = np.asarray(record['values'], dtype=np.float32).reshape(shape)
            except ValueError as e:
                raise ValueError(f"Weight record {index}: {e}")
            if array.shape != tuple(target.shape):
                raise ValueError(
                    f"Weight record {index} has shape {list(array.shape)}, "
                    f"expected {list(target.shape)}"
                )
            arrays.append(array)

        with torch.no_grad():
            for target, array in zip(targets, arrays):
                target.copy_(torch.from_numpy(array))

    def clone_network(self, network: DenseNetwork) -> DenseNetwork:
        """
        Create a copy of a network with the same weights.

        Args:
            network: Network to clone.

        Returns:
            A new network with identical, independently stored weights.
        """
        new_network = self.from_layers(network.input_size, network.layer_specs)
        state = {name: value.clone() for name, value in network.state_dict().items()}
        new_network.load_state_dict(state)
        return new_network

    def get_parameter_count(self, network: nn.Module) -> int:
        """Count the total number of trainable parameters."""
        return sum(p.numel() for p in network.parameters() if p.requires_grad)
