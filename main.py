import os

import uvicorn
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

if __name__ == "__main__":
    # Get port from environment or default to 3000
    port = int(os.environ.get("PORT", 3000))
    uvicorn.run("research_helper.api.app:app", host=os.environ.get("HOST", "127.0.0.1"), port=port, reload=False)
