from .zones import ZonesResource
from .dns import DNSResource
from .custom_hostnames import CustomHostnamesResource
from .r2_buckets import R2BucketsResource
from .kv import KVResource
