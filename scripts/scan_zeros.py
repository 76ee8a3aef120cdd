import argparse
from dataclasses import replace

import hardyz


def main(args):
    cfg = {
        "quick": hardyz.EngineConfig.quick,
        "default": hardyz.EngineConfig.default,
        "high": hardyz.EngineConfig.high_precision,
    }[args.preset]()
    overrides = {"max_workers": args.max_workers}
    if args.method is not None:
        overrides["method"] = args.method
    if args.dtype is not None:
        overrides["dtype"] = args.dtype
    cfg = replace(cfg, **overrides)

    result = hardyz.scan(args.t_min, args.t_max, cfg)
    for i, z in enumerate(result.zeros, 1):
        print(f"{i:5d}  {z:.10f}")
    print(f"{result.count} zeros of Z(t) in [{args.t_min}, {args.t_max}] ({result.method.value}).")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Scan the critical line for zeros of Z(t).")
    parser.add_argument("--t_min", type=float, default=10.0)
    parser.add_argument("--t_max", type=float, default=100.0)
    parser.add_argument("--preset", choices=["quick", "default", "high"], default="default")
    parser.add_argument("--method", default=None,
                        help="euler-maclaurin | riemann-siegel | odlyzko-schonhage (or em/rs/os)")
    parser.add_argument("--dtype", default=None, help="float32 | float64 | longdouble")
    parser.add_argument('--max_workers', type=int, default=1,
                        help='Number of worker processes (default: 1)')
    main(parser.parse_args())
