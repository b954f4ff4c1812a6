import argparse
import logging
import sys
from pathlib import Path

from transport1d.src import ConfigurationError, load_config, run_case

logger = logging.getLogger("transport1d")


def build_parser():
    parser = argparse.ArgumentParser("transport1d",
                                     description="Implicit 1D transport of density in a fixed velocity field.")
    parser.add_argument("case", help="path to the JSON case file")
    parser.add_argument("-r", "--restart", action="store_true", help="continue from the restart file of the case")
    parser.add_argument("-o", "--output-dir", help="directory for result files (overrides the case file)")
    parser.add_argument("--show", action="store_true", help="display result plots in a window")
    parser.add_argument("--plots", action="store_true", help="save result plots next to the result files")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable verbose output")
    parser.add_argument("-vv", "--very-verbose", action="store_true", help="enable very verbose output")
    return parser


def setup_logging(args):
    if args.verbose:
        logger.setLevel(logging.INFO)
        ch = logging.StreamHandler(stream=sys.stdout)
        ch.setLevel(logging.INFO)
    elif args.very_verbose:
        logger.setLevel(logging.DEBUG)
        ch = logging.StreamHandler(stream=sys.stdout)
        ch.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.WARNING)
        ch = logging.StreamHandler(stream=sys.stderr)
        ch.setLevel(logging.WARNING)

    # main may run more than once per process
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    ch.setFormatter(formatter)
    logger.addHandler(ch)


def main(args=None):
    if args is None:
        args = build_parser().parse_args()

    setup_logging(args)

    try:
        config = load_config(args.case)
        if args.restart:
            config.restart = True
        if args.output_dir:
            config.output_dir = args.output_dir

        solver, markers, info = run_case(config)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 2

    print(f"t = {info['time']:.6e}, M = {info['mass']:.10e}")
    print(f"IMAX reached {info['n_capped']} times")

    show = args.show or config.show_results
    if args.plots or show:
        import matplotlib.pyplot as plt

        output_dir = Path(config.output_dir)
        save = args.plots
        solver.plot_solution(str(output_dir / 'solution.png') if save else None, show=show)
        solver.plot_time_series(str(output_dir / 'time_series.png') if save else None, show=show)
        if solver.history.defect:
            solver.plot_convergence(str(output_dir / 'convergence.png') if save else None, show=show)
        plt.close('all')

    return 0


if __name__ == "__main__":
    sys.exit(main())
