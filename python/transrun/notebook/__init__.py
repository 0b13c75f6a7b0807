from IPython.utils.process import arg_split

from transrun.cli import transpile_and_run


def load_ipython_extension(ipython):
    def transrun(line):
        """
        Transpile a source file and run the result in this session.
        Usage:
          %transrun <path> [args...]

        The artifact's public globals are copied into the user namespace.
        """
        args = arg_split(line, posix=True)
        if not args:
            print("Usage: %transrun <path> [args...]")
            return

        module = transpile_and_run(args[0], argv=args, run_name="__main__")

        ipython.user_ns.update(
            {
                name: value
                for name, value in vars(module).items()
                if not name.startswith("_")
            }
        )

    ipython.register_magic_function(transrun, magic_kind="line")


def unload_ipython_extension(ipython):
    ipython.magics_manager.magics["line"].pop("transrun", None)
