"""
Tests for genome persistence.
"""
import json

import numpy as np
import pytest
import torch

from apps.dino.evolution import Genome, GenomeStore
from apps.dino.exceptions import GenomeLoadError

from .conftest import filled_genome


@pytest.fixture
def store(genomes_dir):
    return GenomeStore(genomes_dir)


def legacy_record(genome):
    """A record in the nested browser-export layout."""
    weights = GenomeStore('.').builder.export_weights(genome.network)
    return {
        'fitness': genome.fitness,
        'config': {
            'layers': [
                {'class_name': 'Dense', 'config': spec.to_json()}
                for spec in genome.network.layer_specs
            ],
        },
        'weights': [
            {'values': np.asarray(w['values']).reshape(w['shape']).tolist(), 'shape': w['shape']}
            for w in weights
        ],
    }


class TestGenomeStore:
    """Tests for GenomeStore."""

    def test_save_and_load(self, store):
        """Test that loaded genomes produce the same outputs."""
        genomes = [Genome.build() for _ in range(3)]
        for index, genome in enumerate(genomes):
            genome.fitness = float(index)

        path = store.save(genomes, generation=2)
        loaded = store.load(path)

        assert [g.id for g in loaded] == [g.id for g in genomes]
        assert [g.fitness for g in loaded] == [0.0, 1.0, 2.0]
        features = [0.4, 0.5, 0.1, 0.9]
        for original, restored in zip(genomes, loaded):
            assert restored.predict(features) == original.predict(features)

    def test_default_file_name(self, store, genomes_dir):
        path = store.save([Genome.build()], generation=7)
        assert path.parent == genomes_dir
        assert path.name.startswith('gen_7_')
        assert path.suffix == '.json'
        assert store.list_files() == [path]

    def test_explicit_path(self, store, tmp_path):
        path = store.save([Genome.build()], generation=1, path=tmp_path / 'best.json')
        assert path == tmp_path / 'best.json'
        assert len(json.loads(path.read_text())) == 1

    def test_record_layout(self, store):
        genome = filled_genome(0.5)
        record = store.to_record(genome)
        assert record['input_size'] == 4
        assert [layer['units'] for layer in record['layers']] == [4, 3]
        assert [w['shape'] for w in record['weights']] == [[4, 4], [4], [4, 3], [3]]

    def test_malformed_record_is_skipped(self, store, tmp_path):
        """Test that one bad record does not stop the rest loading."""
        good = store.to_record(filled_genome(0.25))
        bad = dict(good, weights=good['weights'][:2])
        path = tmp_path / 'mixed.json'
        path.write_text(json.dumps([bad, good, 'garbage']))

        loaded = store.load(path)

        assert len(loaded) == 1
        assert all(torch.all(p == 0.25) for p in loaded[0].network.parameters())

    def test_non_numeric_fields_are_skipped(self, store, tmp_path):
        """Test that bad fitness or generation values only drop that record."""
        good = store.to_record(filled_genome(0.25))
        path = tmp_path / 'bad_numbers.json'
        path.write_text(json.dumps([
            dict(good, fitness='not-a-number'),
            dict(good, generation='seven'),
            good,
        ]))

        loaded = store.load(path)

        assert len(loaded) == 1

    def test_non_numeric_fitness_raises_load_error(self, store):
        record = dict(store.to_record(filled_genome(0.25)), fitness='high')
        with pytest.raises(GenomeLoadError):
            store.from_record(record)

    def test_from_record_errors(self, store):
        with pytest.raises(GenomeLoadError):
            store.from_record({'weights': []})
        with pytest.raises(GenomeLoadError):
            store.from_record({'layers': [{'units': 3, 'activation': 'tanh'}]})

    def test_load_requires_list(self, store, tmp_path):
        path = tmp_path / 'single.json'
        path.write_text(json.dumps({'layers': []}))
        with pytest.raises(GenomeLoadError):
            store.load(path)

    def test_legacy_format(self, store, tmp_path):
        """Test loading nested layer configs and nested weight values."""
        genome = Genome.build()
        genome.fitness = 4.0
        path = tmp_path / 'legacy.json'
        path.write_text(json.dumps([legacy_record(genome)]))

        loaded = store.load(path)

        assert len(loaded) == 1
        assert loaded[0].fitness == 4.0
        assert loaded[0].network.input_size == 4
        features = [0.1, 0.2, 0.3, 0.4]
        assert loaded[0].predict(features) == pytest.approx(genome.predict(features))

    def test_list_files_missing_directory(self, tmp_path):
        assert GenomeStore(tmp_path / 'missing').list_files() == []

    def test_legacy_activation_object_defaults_to_relu(self, store):
        """Test that non-string activations in the legacy layout load as relu."""
        genome = Genome.build()
        record = legacy_record(genome)
        record['config']['layers'][0]['config']['activation'] = {'class_name': 'ReLU'}

        loaded = store.from_record(record)

        assert loaded.network.layer_specs[0].activation.value == 'relu'
        assert loaded.network.layer_specs[1].activation.value == 'softmax'

    def test_current_layout_rejects_activation_object(self, store):
        record = store.to_record(Genome.build())
        record['layers'][0]['activation'] = {'class_name': 'ReLU'}
        with pytest.raises(GenomeLoadError):
            store.from_record(record)
