"""Named-operation endpoints - the invoke/query wire contract."""

from fastapi import APIRouter, Depends

from ledger.dependencies import get_dispatcher
from ledger.schemas.api import OperationRequest, OperationResponse
from ledger.services.dispatch import Dispatcher

router = APIRouter()


@router.post(
    "/invoke",
    response_model=OperationResponse,
    summary="Run a state-changing operation",
)
async def invoke(
    data: OperationRequest,
    dispatcher: Dispatcher = Depends(get_dispatcher),
) -> OperationResponse:
    """Run createAccount, createAsset, sell or buy with positional string arguments."""
    result = await dispatcher.invoke(data.function, data.args)
    return OperationResponse(result=result)


@router.post(
    "/query",
    response_model=OperationResponse,
    summary="Run a read-only operation",
)
async def query(
    data: OperationRequest,
    dispatcher: Dispatcher = Depends(get_dispatcher),
) -> OperationResponse:
    """Run getAccount or getAssets with positional string arguments."""
    result = await dispatcher.query(data.function, data.args)
    return OperationResponse(result=result)
