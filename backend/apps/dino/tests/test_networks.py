"""
Tests for the network infrastructure.

Tests the NetworkBuilder, DenseNetwork, and architecture presets for:
- JSON to PyTorch conversion
- Weight export/import in [in, units] kernel layout
- Architecture validation
- Network cloning
"""
import numpy as np
import pytest
import torch

from apps.dino.networks import (
    ACTION_COUNT,
    FEATURE_COUNT,
    Activation,
    DenseLayer,
    DenseNetwork,
    NetworkBuilder,
    create_dense_architecture,
    dino_controller_architecture,
)


class TestDenseLayer:
    """Tests for DenseLayer specs."""

    def test_from_json_defaults(self):
        """Test that activation and bias have defaults."""
        layer = DenseLayer.from_json({'units': 5})
        assert layer.units == 5
        assert layer.activation is Activation.RELU
        assert layer.use_bias is True

    def test_round_trip(self):
        """Test to_json/from_json symmetry."""
        layer = DenseLayer(units=3, activation=Activation.SOFTMAX, use_bias=False)
        assert DenseLayer.from_json(layer.to_json()) == layer

    def test_unknown_activation(self):
        """Test that unknown activations are rejected."""
        with pytest.raises(ValueError, match="Unknown activation"):
            DenseLayer.from_json({'units': 3, 'activation': 'tanh'})

    def test_missing_units(self):
        """Test that units are required."""
        with pytest.raises(ValueError, match="units"):
            DenseLayer.from_json({'activation': 'relu'})

    def test_non_positive_units(self):
        with pytest.raises(ValueError):
            DenseLayer.from_json({'units': 0})


class TestNetworkBuilder:
    """Tests for NetworkBuilder."""

    def test_from_json_creates_network(self, builder, controller_architecture):
        """Test that from_json creates a valid network."""
        network = builder.from_json(controller_architecture)
        assert isinstance(network, DenseNetwork)
        assert network.input_size == FEATURE_COUNT
        assert network.output_size == ACTION_COUNT

    def test_from_json_preserves_architecture(self, builder, controller_architecture):
        """Test that network reports its architecture."""
        network = builder.from_json(controller_architecture)
        assert network.architecture == controller_architecture
        assert builder.to_json(network) == controller_architecture

    def test_forward_is_a_distribution(self, builder, controller_architecture):
        """Test that the softmax head produces probabilities."""
        network = builder.from_json(controller_architecture)
        output = network(torch.rand(5, FEATURE_COUNT))
        assert output.shape == (5, ACTION_COUNT)
        assert torch.allclose(output.sum(dim=-1), torch.ones(5), atol=1e-5)

    def test_missing_layers(self, builder):
        with pytest.raises(ValueError, match="layers"):
            builder.from_json({'input_size': 4})

    def test_missing_input_size(self, builder):
        with pytest.raises(ValueError, match="input_size"):
            builder.from_json({'layers': [{'units': 3}]})

    def test_empty_layers(self, builder):
        with pytest.raises(ValueError, match="at least one layer"):
            builder.from_json({'input_size': 4, 'layers': []})

    def test_not_a_dict(self, builder):
        with pytest.raises(ValueError):
            builder.from_json(['layers'])

    def test_parameter_count(self, builder, controller_architecture):
        """Test 4*4+4 + 4*3+3 parameters."""
        network = builder.from_json(controller_architecture)
        assert builder.get_parameter_count(network) == 35


class TestWeightSerialization:
    """Tests for weight export/import."""

    def test_export_shapes(self, builder, controller_architecture):
        """Test that kernels are exported as [in, units]."""
        network = builder.from_json(controller_architecture)
        records = builder.export_weights(network)
        assert [r['shape'] for r in records] == [[4, 4], [4], [4, 3], [3]]
        assert all(len(r['values']) == int(np.prod(r['shape'])) for r in records)

    def test_export_kernel_is_transposed(self, builder):
        """Test that kernel values follow the [in, units] layout."""
        network = builder.from_json(create_dense_architecture(2, output_size=3))
        with torch.no_grad():
            network.linears[0].weight.copy_(torch.arange(6, dtype=torch.float32).reshape(3, 2))

        kernel = builder.export_weights(network)[0]
        assert kernel['shape'] == [2, 3]
        assert kernel['values'] == [0.0, 2.0, 4.0, 1.0, 3.0, 5.0]

    def test_import_round_trip(self, builder, controller_architecture):
        """Test that imported weights reproduce the same outputs."""
        source = builder.from_json(controller_architecture)
        target = builder.from_json(controller_architecture)

        builder.import_weights(builder.export_weights(source), target)

        x = torch.rand(3, FEATURE_COUNT)
        assert torch.equal(source(x), target(x))

    def test_import_nested_values(self, builder, controller_architecture):
        """Test that nested value arrays are accepted."""
        source = builder.from_json(controller_architecture)
        records = [
            {'values': np.asarray(r['values']).reshape(r['shape']).tolist(), 'shape': r['shape']}
            for r in builder.export_weights(source)
        ]
        target = builder.from_json(controller_architecture)
        builder.import_weights(records, target)

        for a, b in zip(source.parameters(), target.parameters()):
            assert torch.equal(a, b)

    def test_import_wrong_count(self, builder, controller_architecture):
        network = builder.from_json(controller_architecture)
        records = builder.export_weights(network)[:-1]
        with pytest.raises(ValueError, match="Expected 4 weight tensors"):
            builder.import_weights(records, network)

    def test_import_wrong_shape(self, builder, controller_architecture, wide_architecture):
        """Test that weights from another topology are rejected."""
        wide = builder.from_json(wide_architecture)
        network = builder.from_json(controller_architecture)
        with pytest.raises(ValueError, match="shape"):
            builder.import_weights(builder.export_weights(wide), network)


class TestCloneNetwork:
    """Tests for network cloning."""

    def test_clone_same_outputs(self, builder, controller_architecture):
        network = builder.from_json(controller_architecture)
        clone = builder.clone_network(network)

        x = torch.rand(2, FEATURE_COUNT)
        assert torch.equal(network(x), clone(x))

    def test_clone_does_not_share_storage(self, builder, controller_architecture):
        """Test that changing the clone leaves the source intact."""
        network = builder.from_json(controller_architecture)
        original = [p.clone() for p in network.parameters()]

        clone = builder.clone_network(network)
        with torch.no_grad():
            for param in clone.parameters():
                param.add_(1.0)

        for orig, current in zip(original, network.parameters()):
            assert torch.equal(orig, current)


class TestArchitectures:
    """Tests for architecture presets."""

    def test_controller_topology(self):
        arch = dino_controller_architecture()
        assert arch['input_size'] == 4
        assert [layer['units'] for layer in arch['layers']] == [4, 3]
        assert [layer['activation'] for layer in arch['layers']] == ['relu', 'softmax']

    def test_dense_architecture_hidden_layers(self):
        arch = create_dense_architecture(4, hidden_sizes=[8, 6], output_size=3)
        assert [layer['units'] for layer in arch['layers']] == [8, 6, 3]
        assert arch['layers'][-1]['activation'] == 'softmax'
