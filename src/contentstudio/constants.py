import os

from dotenv import load_dotenv

load_dotenv(os.getenv("ENV_FILE"), override=True)


def load_env_from_parameter_store(parameter_name: str, region: str | None = None) -> int:
    """Load KEY=VALUE lines stored in an AWS SSM parameter into os.environ.

    Args:
        parameter_name: Name of the SecureString parameter
        region: AWS region (default: REGION env var or us-east-1)

    Returns:
        Number of variables loaded
    """
    import boto3

    ssm = boto3.client("ssm", region_name=region or os.getenv("REGION", "us-east-1"))
    response = ssm.get_parameter(Name=parameter_name, WithDecryption=True)
    envs = response["Parameter"]["Value"]

    count = 0
    for line in envs.splitlines():
        if not line.strip() or line.startswith("#") or "=" not in line:
            continue

        key, value = line.split("=", 1)
        os.environ[key.strip()] = value
        count += 1

    return count


if env_secret := os.getenv("ENV_SECRET"):
    try:
        loaded = load_env_from_parameter_store(env_secret)
        print(f"Environment variables loaded from {env_secret}. Total loaded: {loaded}")
    except Exception as e:
        print(f"Error loading environment variables from AWS Parameter Store: {e}")

# General
PRODUCT = os.getenv("PRODUCT", "contentstudio")
ENV = os.getenv("ENV", "dev")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text")

# LLM
LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")
# Plagiarism detection needs the larger model
QUALITY_CHECK_MODEL = os.getenv("QUALITY_CHECK_MODEL", "gpt-4o")
LANGUAGE_DETECTION_MODEL = os.getenv("LANGUAGE_DETECTION_MODEL", LLM_MODEL)

# Quality gate thresholds (scores are 0-100)
RELEVANCE_THRESHOLD = int(os.getenv("RELEVANCE_THRESHOLD", "60"))
ORIGINALITY_THRESHOLD = int(os.getenv("ORIGINALITY_THRESHOLD", "75"))
DIFFICULTY_THRESHOLD = int(os.getenv("DIFFICULTY_THRESHOLD", "60"))
CONSISTENCY_THRESHOLD = int(os.getenv("CONSISTENCY_THRESHOLD", "60"))
QUALITY_TEXT_LIMIT = 4000

# Language gate
LANGUAGE_RATIO_THRESHOLD = 0.05
LANGUAGE_MIN_CHAR_COUNT = 3
LANGUAGE_DETECTION_SAMPLE_LENGTH = 500
DEFAULT_LANGUAGE = "en"

# Audio narration
MAX_AUDIO_TEXT_LENGTH = 4000
TTS_MODEL = os.getenv("TTS_MODEL", "tts-1")
TTS_VOICE = os.getenv("TTS_VOICE", "alloy")
TTS_FORMAT = os.getenv("TTS_FORMAT", "mp3")
AUDIO_OUTPUT_DIR = os.getenv("AUDIO_OUTPUT_DIR", "generated_audio")
AUDIO_PUBLIC_BASE_URL = os.getenv("AUDIO_PUBLIC_BASE_URL", "") or None

# Storage
CONTENT_STORE_PATH = os.getenv("CONTENT_STORE_PATH", "content_store.json")
