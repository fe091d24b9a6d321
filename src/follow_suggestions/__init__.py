
from dotenv import load_dotenv

# Load environment variables from .env as early as possible so config
# helpers which read os.environ see the configured values.
load_dotenv()
