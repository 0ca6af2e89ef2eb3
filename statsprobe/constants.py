"""
Management protocol constants for cache and channel statistics.
"""

from .config import CROSSDC_JMX_DOMAIN, DEFAULT_JMX_DOMAIN

DOMAIN_INFINISPAN_DATAGRID = DEFAULT_JMX_DOMAIN
DOMAIN_WILDFLY_CLUSTERING = CROSSDC_JMX_DOMAIN

TYPE_CACHE = "Cache"
TYPE_CACHE_MANAGER = "CacheManager"
TYPE_CHANNEL = "channel"
COMPONENT_STATISTICS = "Statistics"

# Operations
OPERATION_CACHE_RESET = "resetStatistics"
OPERATION_CHANNEL_RESET = "resetStats"

# Cache statistics
STAT_CACHE_AVERAGE_READ_TIME = "averageReadTime"
STAT_CACHE_AVERAGE_WRITE_TIME = "averageWriteTime"
STAT_CACHE_ELAPSED_TIME = "elapsedTime"
STAT_CACHE_EVICTIONS = "evictions"
STAT_CACHE_HITS = "hits"
STAT_CACHE_HIT_RATIO = "hitRatio"
STAT_CACHE_MISSES = "misses"
STAT_CACHE_NUMBER_OF_ENTRIES = "numberOfEntries"
STAT_CACHE_NUMBER_OF_ENTRIES_IN_MEMORY = "numberOfEntriesInMemory"
STAT_CACHE_READ_WRITE_RATIO = "readWriteRatio"
STAT_CACHE_REMOVE_HITS = "removeHits"
STAT_CACHE_REMOVE_MISSES = "removeMisses"
STAT_CACHE_STORES = "stores"
STAT_CACHE_TIME_SINCE_RESET = "timeSinceReset"

# Channel statistics
STAT_CHANNEL_ADDRESS = "address"
STAT_CHANNEL_ADDRESS_UUID = "address_uuid"
STAT_CHANNEL_CLOSED = "closed"
STAT_CHANNEL_CLUSTER_NAME = "cluster_name"
STAT_CHANNEL_CONNECTED = "connected"
STAT_CHANNEL_CONNECTING = "connecting"
STAT_CHANNEL_DISCARD_OWN_MESSAGES = "discard_own_messages"
STAT_CHANNEL_OPEN = "open"
STAT_CHANNEL_RECEIVED_BYTES = "received_bytes"
STAT_CHANNEL_RECEIVED_MESSAGES = "received_messages"
STAT_CHANNEL_SENT_BYTES = "sent_bytes"
STAT_CHANNEL_SENT_MESSAGES = "sent_messages"
STAT_CHANNEL_STATE = "state"
STAT_CHANNEL_STATS = "stats"
STAT_CHANNEL_VIEW = "view"
