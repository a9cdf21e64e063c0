import os
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()

# RPC endpoints for supported networks
RPC_URLS = {
    "eclipse": os.getenv('ECLIPSE_RPC', "https://mainnetbeta-rpc.eclipse.xyz"),
}

DEFAULT_NETWORK = os.getenv('SANDGLASS_NETWORK', "eclipse")

# Commitment used for every RPC read
RPC_COMMITMENT = os.getenv('RPC_COMMITMENT', "processed")

# Request timeout for RPC and oracle calls (seconds)
REQUEST_TIMEOUT = float(os.getenv('REQUEST_TIMEOUT', "30"))

# Program and sysvar addresses
PROGRAM_IDS = {
    "sandglass": "SANDsy8SBzwUE8Zio2mrYZYqL52Phr2WQb9DDKuXMVK",
    "token_2022": "TokenzQdBNbLqP5VEhdkAS6EPFLC1PWnBkdmBXzbEq",
    "sysvar_clock": "SysvarC1ock11111111111111111111111111111111",
}

# Account data sizes used as getProgramAccounts filters
ACCOUNT_SIZES = {
    "market": 1104,
    "sandglass_account": 416,
    # Token-2022 accounts without and with the immutable-owner extension
    "token_account": [165, 170],
}

# Pyth Hermes price service
PYTH_CONFIG = {
    "base_url": os.getenv('PYTH_HERMES_URL', "https://hermes.pyth.network"),
    "price_path": "/v2/updates/price/latest",
    "feeds_path": "/v2/price_feeds",
}

# Pyth price feed ids (USD quoted); unset ids are looked up by symbol on Hermes
PYTH_FEEDS = {
    "ETH/USD": os.getenv(
        'PYTH_ETH_USD_FEED_ID',
        "0xff61491a931112ddf1bd8147cd1b641375f79f5825126d665480874634fd0ace"
    ),
    "tETH/USD": os.getenv('PYTH_TETH_USD_FEED_ID'),
}

# SY mint -> oracle feeds of a FIXED_ACCRUAL market
# ybt_feed prices the yield-bearing token, base_feed its base asset
ORACLE_FEEDS = {
    "eclipse": {
        "GU7NS9xCwgNPiAdJ69iusFrRfawjDDPjeMBovhV1d4kn": {
            "symbol": "tETH",
            "ybt_feed": "tETH/USD",
            "base_feed": "ETH/USD",
        },
    }
}

# Output files written by the snapshot builder
OUTPUT_CONFIG = {
    "directory": os.getenv('OUTPUT_DIR', "."),
    "snapshot_filename": "output_snapshot.json",
    "user_tokens_prefix": "output_user_tokens_",
}

# Decoded market/stake export read by the market mapper
MARKETS_FILE = os.getenv('SANDGLASS_MARKETS_FILE', "sandglass/markets/markets.json")
