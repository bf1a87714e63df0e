"""Static catalog of LLM models offered when editing a prompt."""
import json
import logging
from functools import lru_cache
from pathlib import Path

from schemas.model_catalog import LLMModel, ModelOption

logger = logging.getLogger(__name__)

BUNDLED_CATALOG_PATH = Path(__file__).parent / "data" / "llm_models.json"


class ModelCatalog:
    """Read-only list of models, keyed by item identifier."""

    def __init__(self, models: list[LLMModel]) -> None:
        self._models = list(models)
        self._by_item = {model.item: model for model in self._models}

    @classmethod
    def from_file(cls, path: Path) -> "ModelCatalog":
        """
        Load a catalog from a JSON file of the form {"models": [...]}.

        Raises:
            OSError: If the file cannot be read.
            ValueError: If the JSON or any record is malformed.
        """
        data = json.loads(path.read_text(encoding="utf-8"))
        models = [LLMModel.model_validate(record) for record in data.get("models", [])]
        logger.info("Loaded %d models from %s", len(models), path)
        return cls(models)

    @property
    def models(self) -> list[LLMModel]:
        """All models in file order."""
        return list(self._models)

    def get(self, item: str) -> LLMModel | None:
        """Look up a model by its item identifier."""
        return self._by_item.get(item)

    def options(self) -> list[ModelOption]:
        """Models formatted for a selection list: "item (vendor)"."""
        return [
            ModelOption(value=model.item, label=f"{model.item} ({model.vendor})")
            for model in self._models
        ]


@lru_cache
def load_model_catalog(path: str | None = None) -> ModelCatalog:
    """Load the catalog once per process; None selects the bundled catalog."""
    return ModelCatalog.from_file(Path(path) if path else BUNDLED_CATALOG_PATH)
