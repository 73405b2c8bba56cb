"""Allow ``python -m advisor``."""

from advisor.main import main

main()
