"""Allow ``python -m vercel_deploy``."""

from vercel_deploy.main import main

main()
