import os

from dotenv import load_dotenv

load_dotenv()

RPC_URL = os.getenv('RPC_URL', 'https://api.mainnet-beta.solana.com')
HTTP_TIMEOUT = float(os.getenv('HTTP_TIMEOUT', '10'))    # seconds, applied to RPC and uri fetches
LOG_LEVEL = os.getenv('LOG_LEVEL', 'WARNING')
