import asyncio

from fastapi import Request

from actnames.config import Config, get_config
from actnames.logging import get_logger
from actnames.models import FeatureRecord
from actnames.sources.arcgis import FeatureService
from actnames.sources.wikipedia import SummaryService

_logger = get_logger(__name__)


class Runtime:
    def __init__(
        self,
        config: Config | None = None,
        features: FeatureService | None = None,
        summaries: SummaryService | None = None,
    ):
        self.config = config or get_config()
        self.features = features or FeatureService(
            layer_url=self.config.layer_url,
            timeout=self.config.http_timeout,
            page_size=self.config.page_size,
        )
        self.summaries = summaries or SummaryService(
            base_url=self.config.summary_url,
            timeout=self.config.http_timeout,
        )

        self._dataset: list[FeatureRecord] | None = None
        self._by_id: dict[int, FeatureRecord] = {}
        self._dataset_lock = asyncio.Lock()

    @property
    def dataset_loaded(self) -> bool:
        return self._dataset is not None

    async def get_dataset(self) -> list[FeatureRecord]:
        """Full layer, fetched once per runtime. A failed or cancelled load leaves nothing cached."""
        if self._dataset is not None:
            return self._dataset

        async with self._dataset_lock:
            if self._dataset is None:
                _logger.info("Loading full dataset", layer_url=self.config.layer_url)
                records = await self.features.fetch_all_features(
                    on_progress=lambda n: _logger.debug("dataset progress", loaded=n)
                )
                self._by_id = {r.object_id: r for r in records}
                self._dataset = records
        return self._dataset

    async def get_feature(self, object_id: int) -> FeatureRecord | None:
        if self._dataset is not None:
            return self._by_id.get(object_id)
        return await self.features.get_feature(object_id)

    def clear_dataset(self) -> None:
        self._dataset = None
        self._by_id = {}


def get_runtime(request: Request) -> Runtime:
    return request.app.state.runtime
