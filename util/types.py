from typing import NewType

EventTrackingId = NewType('EventTrackingId', str)
ReservationId = NewType('ReservationId', str)
SessionId = NewType('SessionId', str)
ProviderId = NewType('ProviderId', str)
ChargeDetailRecordId = NewType('ChargeDetailRecordId', str)
AuthToken = NewType('AuthToken', str)
