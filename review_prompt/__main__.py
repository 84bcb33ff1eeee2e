"""Allow `python -m review_prompt <PR_ID>`."""

from review_prompt.cli import main

if __name__ == "__main__":
    main()
