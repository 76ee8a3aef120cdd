import hardyz


def test_layout():
    for name in ("theta", "bernoulli", "binomial", "compute", "compute_block",
                 "HardyZ", "Method", "EngineConfig", "scan"):
        assert hasattr(hardyz, name)


def test_module_level_evaluator_is_double():
    assert hardyz.compute(30.0).dtype.name == "float64"
