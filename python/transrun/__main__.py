import logging
import sys

USAGE = (
    "Usage: python -m transrun [--trans] [--verbose] [--mode <mode>] "
    "[--transpiler <name|module:attr>] [--out <file.py>] <source> [args...]"
)


def main():
    transpile_only = False
    verbose = False
    out_file = None
    transpiler = None
    backend_options = {}

    while len(sys.argv) > 1:
        if sys.argv[1] == "--help":
            print(USAGE)
            sys.exit(1)

        if sys.argv[1] in ("--mode", "--transpiler", "--out"):
            flag = sys.argv.pop(1)
            if len(sys.argv) < 2:
                print(f"Error: {flag} requires a value", file=sys.stderr)
                sys.exit(1)
            value = sys.argv.pop(1)

            if flag == "--mode":
                backend_options["mode"] = value
            elif flag == "--transpiler":
                transpiler = value
            else:
                out_file = value
            continue

        elif sys.argv[1] == "--trans":
            del sys.argv[1]
            transpile_only = True
            continue

        elif sys.argv[1] == "--verbose":
            del sys.argv[1]
            verbose = True
            continue

        break

    if len(sys.argv) < 2:
        print(USAGE, file=sys.stderr)
        sys.exit(1)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(name)s: %(levelname)s: %(message)s"
        )

    from transrun import LoadError, TranspileError
    from transrun.cli import (
        read_source,
        transpile_and_run,
        transpile_from_source,
    )
    from transrun.options import TranspileOptions

    script_path = sys.argv[1]
    argv = sys.argv[1:]

    options = TranspileOptions(
        in_file=script_path,
        out_file=out_file,
        transpiler=transpiler,
        backend_options=backend_options,
    )

    try:
        if transpile_only:
            print(
                transpile_from_source(
                    read_source(options.in_file),
                    script_path=script_path,
                    transpiler=transpiler,
                    backend_options=backend_options,
                )
            )
        else:
            transpile_and_run(options, argv=argv)
    except (TranspileError, LoadError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
