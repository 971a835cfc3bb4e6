from abc import abstractmethod, ABCMeta

from entities.data.requests import ReserveRequest, CancelReservationRequest, RemoteStartRequest, RemoteStopRequest
from entities.data.results import ReservationResult, CancelReservationResult, RemoteStartResult, RemoteStopResult


class RemoteChargingInterface(metaclass=ABCMeta):
    """
    Execution path behind an EVSE, charging station, pool or operator. Requests
    arrive fully validated with ``evse_id`` filled in; timeouts and cancellation
    travel inside the request and are enforced here, not by the caller.
    """

    @abstractmethod
    async def reserve(self, request: ReserveRequest) -> ReservationResult:
        pass

    @abstractmethod
    async def cancel_reservation(self, request: CancelReservationRequest) -> CancelReservationResult:
        pass

    @abstractmethod
    async def remote_start(self, request: RemoteStartRequest) -> RemoteStartResult:
        pass

    @abstractmethod
    async def remote_stop(self, request: RemoteStopRequest) -> RemoteStopResult:
        pass
