"""
Genome persistence.

Populations are saved as a JSON list with one record per genome:

    {
        "id": "...", "fitness": 3, "generation": 7, "input_size": 4,
        "layers": [{"units": 4, "activation": "relu", "use_bias": true}, ...],
        "weights": [{"values": [...], "shape": [4, 4]}, ...]
    }

Files written by the earlier browser tooling nest the layers under
`config.layers[].config` and store `values` as nested arrays; both are
accepted on load. A malformed record is skipped and logged, and the
rest of the file still loads.
"""
import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from ..exceptions import GenomeLoadError
from ..networks import FEATURE_COUNT, DenseLayer, NetworkBuilder
from .genome import Genome

logger = logging.getLogger(__name__)


class GenomeStore:
    """
    Save and load genomes as JSON files.

    Attributes:
        directory: Where save() writes population files.

    Example:
        store = GenomeStore('./genomes')
        path = store.save(population.individuals, generation=3)
        genomes = store.load(path)
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        self.builder = NetworkBuilder()

    def to_record(self, genome: Genome) -> Dict[str, Any]:
        """Serialize one genome."""
        return {
            'id': genome.id,
            'fitness': genome.fitness,
            'generation': genome.generation,
            'input_size': genome.network.input_size,
            'layers': [spec.to_json() for spec in genome.network.layer_specs],
            'weights': self.builder.export_weights(genome.network),
        }

    def from_record(self, record: Dict[str, Any]) -> Genome:
        """
        Rebuild one genome.

        Raises:
            GenomeLoadError: If the record is malformed.
        """
        if not isinstance(record, dict):
            raise GenomeLoadError("Genome record must be a dictionary")

        try:
            layers = [DenseLayer.from_json(spec) for spec in self._layer_specs(record)]
            weights = record.get('weights')
            input_size = self._input_size(record, weights)
            network = self.builder.from_layers(input_size, layers)
            if weights:
                self.builder.import_weights(weights, network)
            else:
                logger.warning("Genome record has no weights; keeping random init")

            fitness = record.get('fitness')
            fitness = float(fitness) if fitness is not None else None
            generation = int(record.get('generation', 0) or 0)
        except GenomeLoadError:
            raise
        except (KeyError, TypeError, ValueError) as e:
            raise GenomeLoadError(f"Malformed genome record: {e}") from e

        return Genome(
            network=network,
            fitness=fitness,
            generation=generation,
            id=str(record.get('id') or ''),
        )

    def _layer_specs(self, record: Dict[str, Any]) -> List[Dict[str, Any]]:
        if 'layers' in record:
            layers = record['layers']
        elif isinstance(record.get('config'), dict) and 'layers' in record['config']:
            layers = [self._legacy_layer(layer) for layer in record['config']['layers']]
        else:
            raise GenomeLoadError("Genome record has no layers")

        if not isinstance(layers, list) or not layers:
            raise GenomeLoadError("Genome layers must be a non-empty list")
        return layers

    def _legacy_layer(self, layer: Any) -> Any:
        if not isinstance(layer, dict):
            return layer
        spec = dict(layer.get('config', layer))
        # Activation objects in browser exports default to relu
        if not isinstance(spec.get('activation', 'relu'), str):
            spec['activation'] = 'relu'
        return spec

    def _input_size(
        self,
        record: Dict[str, Any],
        weights: Optional[Sequence[Dict[str, Any]]],
    ) -> int:
        if record.get('input_size'):
            return int(record['input_size'])
        if weights:
            shape = weights[0].get('shape') if isinstance(weights[0], dict) else None
            if shape and len(shape) == 2:
                return int(shape[0])
        return FEATURE_COUNT

    def save(
        self,
        genomes: Iterable[Genome],
        generation: int,
        path: Optional[Union[str, Path]] = None,
    ) -> Path:
        """
        Write genomes to a JSON file.

        Args:
            genomes: Genomes to save.
            generation: Generation number, used in the default file name.
            path: Optional explicit file path.

        Returns:
            Path to the saved file.
        """
        records = [self.to_record(genome) for genome in genomes]

        if path is None:
            self.directory.mkdir(parents=True, exist_ok=True)
            millis = int(time.time() * 1000)
            path = self.directory / f'gen_{generation}_{millis}.json'
        path = Path(path)

        logger.info("Saving %d genomes...", len(records))
        with open(path, 'w') as f:
            json.dump(records, f, indent=2)
        logger.info("Saved to %s", path)
        return path

    def load(self, path: Union[str, Path]) -> List[Genome]:
        """
        Load genomes from a JSON file.

        Args:
            path: File written by save() (or the legacy format).

        Returns:
            Successfully parsed genomes.
        """
        with open(path) as f:
            records = json.load(f)
        if not isinstance(records, list):
            raise GenomeLoadError(f"{path} does not contain a list of genomes")
        return self.load_records(records)

    def load_records(self, records: Sequence[Dict[str, Any]]) -> List[Genome]:
        """Parse records, skipping and logging the malformed ones."""
        genomes = []
        for index, record in enumerate(records):
            try:
                genomes.append(self.from_record(record))
            except GenomeLoadError as e:
                logger.warning("Error loading genome %d: %s", index, e)

        logger.info(
            "Loaded %d genomes: %s",
            len(genomes),
            ','.join(str(g.fitness) for g in genomes),
        )
        return genomes

    def list_files(self) -> List[Path]:
        """Saved population files, newest first."""
        if not self.directory.exists():
            return []
        return sorted(
            self.directory.glob('gen_*.json'),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )
