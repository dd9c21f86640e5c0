import os

import pytest

from blog.pages import CONTENT_DIR, load_page, placeholders
from ipw.tutorial import inline_values, main, run_binary

POST = CONTENT_DIR / "posts" / "2021-12-18-inverse-probability-weights.md"


def test_binary_results(binary_results):
    res = binary_results
    assert {"propensity", "ipw"} <= set(res["data"].columns)
    assert res["ipw"]["ci_lo"] < res["ipw"]["estimate"] < res["ipw"]["ci_hi"]
    assert res["bootstrap"]["se"] > 0
    assert len(res["sections"]) == 1


def test_continuous_weights_agree(continuous_results):
    assert continuous_results["weights_match"]
    assert continuous_results["max_abs_diff"] < 1e-8


def test_fixed_seed_reproduces_ate():
    a = run_binary(n=400, seed=5, n_boot=0, verbose=False)
    b = run_binary(n=400, seed=5, n_boot=0, verbose=False)
    assert a["ipw"]["estimate"] == b["ipw"]["estimate"]
    assert a["bootstrap"] is None


def test_post_placeholders_are_all_computed(binary_results, continuous_results):
    values = inline_values(binary_results, continuous_results)
    used = placeholders(load_page(POST)["body"])
    assert used
    assert used <= set(values)


def test_inline_values_skip_bootstrap_when_not_run(continuous_results):
    binary = run_binary(n=300, seed=1, n_boot=0, verbose=False)
    values = inline_values(binary, continuous_results)
    assert "ate_boot_se" not in values
    assert values["n"] == 300


def test_figures_are_written(tmp_path):
    res = run_binary(n=300, seed=3, outdir=str(tmp_path), n_boot=0, verbose=False)
    _, fig_path = res["sections"][0]
    assert os.path.exists(fig_path)


def test_main_fills_post(tmp_path, capsys):
    rc = main(["--n", "300", "--n-boot", "5", "--no-figures",
               "--outdir", str(tmp_path), "--fill-post", str(POST)])
    assert rc == 0
    out = (tmp_path / f"{POST.stem}.md").read_text(encoding="utf-8")
    assert "{{" not in out
    assert "Inverse Probability Weighting" in capsys.readouterr().out


def test_main_writes_pdf(tmp_path):
    main(["--n", "300", "--n-boot", "0", "--outdir", str(tmp_path), "--pdf"])
    pdf = tmp_path / "ipw_tutorial.pdf"
    assert pdf.read_bytes().startswith(b"%PDF")
    assert (tmp_path / "fig01_binary.png").exists()
    assert (tmp_path / "fig02_continuous.png").exists()


def test_main_rejects_bad_argument():
    with pytest.raises(SystemExit):
        main(["--n", "many"])


def test_fill_post_without_bootstrap_is_usage_error(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--n", "300", "--n-boot", "0", "--no-figures",
              "--outdir", str(tmp_path), "--fill-post", str(POST)])
    assert exc.value.code == 2
    assert "--n-boot" in capsys.readouterr().err
    assert not (tmp_path / f"{POST.stem}.md").exists()


def test_main_writes_log_file(tmp_path):
    log_file = tmp_path / "run.log"
    main(["--n", "300", "--n-boot", "0", "--no-figures",
          "--outdir", str(tmp_path), "--log-file", str(log_file), "-v"])
    assert "propensity model" in log_file.read_text(encoding="utf-8")
