"""Protocol constants.

Keep these in one place to avoid stringly-typed message handling. The wire
names are fixed by the multi-language protocol and never derived from the
Python attribute names.
"""

# Discriminator field present in every message.
ACTION = "action"

# Actions sent by the coordinator.
INITIALIZE = "initialize"
PROCESS_RECORDS = "processRecords"
LEASE_LOST = "leaseLost"
SHARD_ENDED = "shardEnded"
SHUTDOWN_REQUESTED = "shutdownRequested"

# Actions sent in both directions.
CHECKPOINT = "checkpoint"

# Actions sent by the bridge.
STATUS = "status"

# Field names.
SHARD_ID = "shardId"
SEQUENCE_NUMBER = "sequenceNumber"
SUB_SEQUENCE_NUMBER = "subSequenceNumber"
RECORDS = "records"
MILLIS_BEHIND_LATEST = "millisBehindLatest"
DATA = "data"
PARTITION_KEY = "partitionKey"
APPROXIMATE_ARRIVAL_TIMESTAMP = "approximateArrivalTimestamp"
ERROR = "error"
RESPONSE_FOR = "responseFor"

# Dispatcher states.
IDLE = "IDLE"
DISPATCHING = "DISPATCHING"
AWAITING_CHECKPOINT = "AWAITING_CHECKPOINT"
