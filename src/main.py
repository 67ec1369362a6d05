"""Entry point: oneshot."""

import sys

USAGE = "Usage: python -m src.main oneshot [--type T] [--catalog FILE] [--limit N] QUERY"


def _take_option(args: list[str], flag: str) -> str | None:
    """Remove `flag VALUE` from args and return VALUE."""
    if flag not in args:
        return None
    index = args.index(flag)
    if index + 1 >= len(args):
        print(f"Missing value for {flag}")
        print(USAGE)
        sys.exit(2)
    value = args[index + 1]
    del args[index : index + 2]
    return value


def main():
    mode = sys.argv[1].lower() if len(sys.argv) > 1 else ""

    if mode == "oneshot":
        from src.interfaces.oneshot import main as run_oneshot_main

        args = sys.argv[2:]
        content_type = _take_option(args, "--type") or "institutions"
        catalog_path = _take_option(args, "--catalog")
        limit = _take_option(args, "--limit")
        if limit is not None and not limit.isdigit():
            print(f"Invalid --limit: {limit}")
            sys.exit(2)
        if args:
            query = " ".join(args).strip()
        else:
            query = sys.stdin.read().strip()
        sys.exit(
            run_oneshot_main(
                query=query,
                content_type=content_type,
                catalog_path=catalog_path,
                limit=int(limit) if limit is not None else None,
            )
        )

    else:
        print(f"Unknown mode: {mode}")
        print(USAGE)
        sys.exit(1)


if __name__ == "__main__":
    main()
