import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import uvicorn

from flickhub.config import load_config


def main() -> None:
    cfg = load_config()
    print("\nFlickHub running!")
    print(f"   Health : http://localhost:{cfg.PORT}/api/health")
    print(f"   Movies : http://localhost:{cfg.PORT}/api/tmdb/trending\n")
    uvicorn.run("flickhub.api.server:app", host=cfg.API_HOST, port=cfg.PORT, reload=False)


if __name__ == "__main__":
    main()
