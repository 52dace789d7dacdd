"""Configuration constants for contract-deployer."""

# Literal used in configuration files for "inherit the enclosing default"
NONE_SENTINEL = "none"

# Hex-literal marker prepended to on-disk bytecode
HEX_PREFIX = "0x"

# Batch scheduling
DEFAULT_BATCH_SIZE = 20
DEFAULT_BATCH_INTERVAL = 30.0  # seconds

# Receipt polling
DEFAULT_RECEIPT_TIMEOUT = 120.0  # seconds
DEFAULT_POLL_LATENCY = 0.5  # seconds
DEFAULT_REQUEST_TIMEOUT = 30  # seconds, per HTTP request

# Artifact layout
DEFAULT_ABI_SUB_DIR = "abi"
DEFAULT_ABI_SUFFIX = ".abi"
DEFAULT_BIN_SUB_DIR = "bin"
DEFAULT_BIN_SUFFIX = ".bin"

DEFAULT_RPC_URL = "http://127.0.0.1:8545"

# Auto-miner
DEFAULT_MINE_INTERVAL = 60.0  # seconds; the loop sleeps a tenth of this
DEFAULT_BLOCKS_PER_ROUND = 3

# Environment variable names. The camel-case RPC name is what the geth
# tooling around the original deployer exported.
ENV_RPC_URL = "GETH_HTTP_RPC_ADDR"
ENV_RPC_URL_LEGACY = "GethHttpRpcAddr"
ENV_CONFIG_PATH = "CONFIG_PATH"
ENV_ABI_SUB_DIR = "ABI_SUB_DIR"
ENV_ABI_SUFFIX = "ABI_SUFFIX"
ENV_BIN_SUB_DIR = "BIN_SUB_DIR"
ENV_BIN_SUFFIX = "BIN_SUFFIX"
ENV_BATCH_SIZE = "BATCH_SIZE"
ENV_BATCH_INTERVAL = "BATCH_INTERVAL"
ENV_RECEIPT_TIMEOUT = "RECEIPT_TIMEOUT"
ENV_LOG_LEVEL = "LOG_LEVEL"
ENV_LOG_JSON = "LOG_JSON"
