# Bytes per millisecond -> megabits per second (8 bits * 1000 ms / 1,000,000)
CONVERSION_FACTOR = 0.008

# Window size of a single speed sample
RESOLUTION = 1024 * 1024

# Fixed chunk size the response body is re-blocked into
CHUNK_SIZE = 16 * 1024

# Minimum payload size, in windows of RESOLUTION bytes
MIN_PAYLOAD_WINDOWS = 6

REQUEST_TIMEOUT = 300
