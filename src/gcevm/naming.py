import re


def slugify(value: str) -> str:
    """Lowercases and collapses every run of non-alphanumerics into one hyphen."""
    slug = value.lower().strip()
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    return slug.strip("-")


def create_instance_name(prefix: str, owner: str, repo: str, run_id: int | str) -> str:
    """
    Builds the instance name for a workflow run.

    Format:
        <prefix>-<owner>-<repo>-<run_id>

    Deterministic for the same inputs so logs and outputs can be correlated.
    """
    return slugify("-".join([prefix, owner, repo, str(run_id)]))
