from sqlsampler.cli import get_sqlsampler_group

__all__ = ("run_cli",)


def run_cli() -> None:
    """Run the SQLSampler CLI."""
    get_sqlsampler_group()()


if __name__ == "__main__":
    run_cli()
