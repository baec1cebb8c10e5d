"""Endpoints for image prediction and prediction history."""
from fastapi import APIRouter, Depends, Request, status
from starlette.datastructures import UploadFile

from ..errors import ImageRequiredError, PipelineError, PredictionFailedError, StoreError
from ..schemas import HistoriesResponse, HistoryItem, PredictResponse
from ..services.pipeline import PredictionPipeline
from ..utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


def get_pipeline(request: Request) -> PredictionPipeline:
    return request.app.state.pipeline


@router.post("/predict", status_code=status.HTTP_201_CREATED, response_model=PredictResponse)
async def predict(
    request: Request,
    pipeline: PredictionPipeline = Depends(get_pipeline),
) -> PredictResponse:
    """Classify the uploaded ``image`` field and store the verdict."""
    async with request.form() as form:
        image = form.get("image")
        if not image:
            raise ImageRequiredError()
        if isinstance(image, UploadFile):
            image_bytes = await image.read()
        else:
            image_bytes = image.encode()

    try:
        record = await pipeline.predict(image_bytes)
    except PipelineError as exc:
        logger.warning("Prediction failed", stage=exc.stage, error=str(exc))
        raise PredictionFailedError() from exc
    except StoreError as exc:
        logger.warning("Prediction could not be stored", error=str(exc))
        raise PredictionFailedError() from exc
    return PredictResponse(data=record)


@router.get("/predict/histories", status_code=status.HTTP_200_OK, response_model=HistoriesResponse)
async def list_histories(pipeline: PredictionPipeline = Depends(get_pipeline)) -> HistoriesResponse:
    """Return every stored verdict."""
    records = await pipeline.history()
    return HistoriesResponse(data=[HistoryItem(id=record_id, history=record) for record_id, record in records])
