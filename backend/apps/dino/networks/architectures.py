"""
Preset network architectures for the runner controller.
"""
from typing import Any, Dict, List, Optional

FEATURE_COUNT = 4
ACTION_COUNT = 3


def dino_controller_architecture(
    input_size: int = FEATURE_COUNT,
    hidden_size: int = 4,
    output_size: int = ACTION_COUNT,
) -> Dict[str, Any]:
    """
    The default genome topology.

    Architecture:
        Input (4) -> Hidden (4, relu) -> Output (3, softmax)

    Inputs are [distance, obstacle width, obstacle height, speed];
    outputs are logits for DOWN, NORM and JUMP.
    """
    return create_dense_architecture(
        input_size=input_size,
        hidden_sizes=[hidden_size],
        output_size=output_size,
    )


def create_dense_architecture(
    input_size: int,
    hidden_sizes: Optional[List[int]] = None,
    output_size: int = ACTION_COUNT,
    hidden_activation: str = 'relu',
    output_activation: str = 'softmax',
) -> Dict[str, Any]:
    """
    Create a dense architecture with arbitrary hidden layers.

    Args:
        input_size: Input feature dimension.
        hidden_sizes: Hidden layer widths, in order.
        output_size: Number of outputs.
        hidden_activation: Activation after each hidden layer.
        output_activation: Activation after the output layer.

    Returns:
        JSON architecture specification.
    """
    layers = [
        {'units': size, 'activation': hidden_activation, 'use_bias': True}
        for size in (hidden_sizes or [])
    ]
    layers.append({'units': output_size, 'activation': output_activation, 'use_bias': True})

    return {
        'input_size': input_size,
        'output_size': output_size,
        'layers': layers,
    }
