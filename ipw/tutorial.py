"""
Inverse Probability Weighting for Binary and Continuous Treatments
==================================================================

Narrated walkthrough behind the blog post: simulate a population where
richer, healthier people are both more likely to use mosquito nets and
less likely to get malaria, show that the naive comparison is biased,
and recover the causal effect with inverse probability weights. The
second half repeats the exercise for a continuous treatment (the size of
a net-purchase grant) using density-ratio weights.

Run as `ipw-tutorial` or `python -m ipw.tutorial`.
"""

import argparse
import logging
import os

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from blog.pages import fill_values, load_page

from . import bootstrap as m_boot
from . import continuous as m_cont
from . import effects as m_eff
from . import plots
from . import propensity as m_ps
from .logging_config import setup_logging
from .simulate import (DEFAULT_N, DEFAULT_SEED, TRUE_GRANT_EFFECT,
                       TRUE_NET_EFFECT, simulate_grants, simulate_nets)

logger = logging.getLogger(__name__)

COVARIATES = ["income", "health"]
OUTCOME = "malaria_risk"
DEFAULT_OUTDIR = "output"


def _ipw_ate(df):
    weighted = m_ps.add_binary_weights(df, "net", COVARIATES)
    return m_eff.weighted_effect(weighted, "net", OUTCOME)["estimate"]


def run_binary(n=DEFAULT_N, seed=DEFAULT_SEED, outdir=None, n_boot=200, verbose=True):
    """
    Binary treatment: does using a mosquito net reduce malaria risk?

    Returns
    -------
    dict with keys:
        data      : DataFrame with propensity and ipw columns
        naive, adjusted, ipw, ipw_stabilized : effect dicts
        balance   : standardized mean differences before/after weighting
        bootstrap : bootstrap summary for the IPW ATE (None if n_boot=0)
        truth     : true effect in the simulation
        sections  : [(text, figure_path or None)] for the PDF report
    """
    say = print if verbose else (lambda *a, **k: None)
    sections = []

    text = """\
Part 1: Binary treatment -- mosquito nets

The question
Does sleeping under a mosquito net lower a person's risk of malaria?
We cannot randomize nets, so we look at observational data. The DAG
says income and health each affect both net use and malaria risk:
richer and healthier people buy nets more often *and* get malaria less
often. Temperature affects malaria risk but not net use, so it is not
a confounder.

The back-door paths Net <- Income -> Malaria and Net <- Health ->
Malaria must be closed. Inverse probability weighting closes them by
building a pseudo-population in which net use is unrelated to income
and health, as it would be in a randomized experiment.

Step 1: propensity scores
Fit a logistic regression of net use on income and health:
  P(net = 1 | income, health) = logistic(b0 + b1*income + b2*health)

Step 2: weights (ATE)
  w_i = net_i / p_i + (1 - net_i) / (1 - p_i)
People who used a net despite a low predicted probability count a lot,
because they look like the people who usually go without.

Step 3: weighted difference in means
Regress malaria risk on net use, weighting each row by w_i.
"""
    say(text)

    df = simulate_nets(n=n, seed=seed)
    naive = m_eff.naive_effect(df, "net", OUTCOME)
    adjusted = m_eff.regression_adjusted_effect(df, "net", OUTCOME, COVARIATES)

    weighted = m_ps.add_binary_weights(df, "net", COVARIATES)
    ipw = m_eff.weighted_effect(weighted, "net", OUTCOME)

    stab = weighted.copy()
    stab["ipw"] = m_ps.ipw_weights(stab["net"], stab["propensity"], stabilize=True)
    ipw_stab = m_eff.weighted_effect(stab, "net", OUTCOME)

    balance = m_eff.balance_table(weighted, "net", COVARIATES, weights="ipw")

    boot = None
    if n_boot:
        boot = m_boot.bootstrap_ate(df, _ipw_ate, n_boot=n_boot, seed=seed)

    results = f"""
Results (n = {n}, seed = {seed})
  Net users: {int(df['net'].sum())} of {n}
  Propensity scores range from {weighted['propensity'].min():.3f} to {weighted['propensity'].max():.3f}
  ATE weights: mean = {weighted['ipw'].mean():.2f}, max = {weighted['ipw'].max():.2f}

  Naive difference in means  : {naive['estimate']:.2f}  (SE {naive['se']:.2f})
  Regression adjustment      : {adjusted['estimate']:.2f}  (SE {adjusted['se']:.2f})
  IPW ATE                    : {ipw['estimate']:.2f}  (robust SE {ipw['se']:.2f})
  IPW ATE, stabilized        : {ipw_stab['estimate']:.2f}
  True effect                : {TRUE_NET_EFFECT:g}

Covariate balance (standardized mean differences)
{balance.round(3).to_string()}
"""
    if boot is not None:
        results += f"""
Bootstrap ({n_boot} replications, propensity model refit each time)
  SE = {boot['se']:.3f}, 95% CI = [{boot['ci_lo']:.2f}, {boot['ci_hi']:.2f}]
"""
    results += """
The naive comparison overstates the benefit of nets because net users
are richer and healthier to begin with. After weighting, income and
health are balanced across groups and the estimate is close to the
true effect.
"""
    say(results)
    text += results

    fig_path = None
    if outdir:
        plots.apply_style()
        fig, axes = plt.subplots(1, 3, figsize=(15, 4.5))
        plots.draw_dag(axes[0], plots.NET_DAG_NODES, plots.NET_DAG_EDGES,
                       title="A) DAG", highlight=("Net use", "Malaria risk"))
        plots.plot_propensity_overlap(axes[1], weighted, "net")
        axes[1].set_title("B) Propensity overlap")
        plots.plot_effects(axes[2], {
            "Naive": naive, "Regression": adjusted, "IPW": ipw,
        }, TRUE_NET_EFFECT, title="C) Effect of net use")
        fig.suptitle("Part 1: IPW with a binary treatment", fontsize=14, y=1.03)
        fig.tight_layout()
        fig_path = plots.savefig(fig, outdir, "fig01_binary.png")
    sections.append((text, fig_path))

    return dict(
        data=weighted, naive=naive, adjusted=adjusted, ipw=ipw,
        ipw_stabilized=ipw_stab, balance=balance, bootstrap=boot,
        truth=TRUE_NET_EFFECT, sections=sections,
    )


def run_continuous(n=DEFAULT_N, seed=DEFAULT_SEED, outdir=None, verbose=True):
    """
    Continuous treatment: how much does each extra unit of grant money
    lower malaria risk?

    Returns
    -------
    dict with keys:
        data       : DataFrame with an ipw column
        naive, adjusted, ipw : effect dicts
        weights_match : manual and scipy density ratios agree
        max_abs_diff  : largest absolute difference between the two
        truth      : true per-unit effect
        sections   : [(text, figure_path or None)]
    """
    say = print if verbose else (lambda *a, **k: None)

    text = """\
Part 2: Continuous treatment -- net grants

The question
Now the treatment is an amount: a grant for buying nets, larger for
richer and healthier households. A propensity "probability" no longer
makes sense, so we replace it with a density:

  w_i = f(grant_i) / f(grant_i | income_i, health_i)

Numerator: a normal density from an intercept-only model of the grant.
Denominator: a normal density centred on the fitted value of a linear
regression of the grant on income and health. Both use the residual
standard error of their regression as the scale.

Sanity check
The densities can come from scipy.stats.norm.pdf or from writing the
formula out by hand,
  f(x) = exp(-(x - mu)^2 / (2 sigma^2)) / (sigma sqrt(2 pi)),
and the two sets of weights must agree.
"""
    say(text)

    df = simulate_grants(n=n, seed=seed)
    naive = m_eff.naive_effect(df, "grant", OUTCOME)
    adjusted = m_eff.regression_adjusted_effect(df, "grant", OUTCOME, COVARIATES)

    weighted = m_cont.add_continuous_weights(df, "grant", COVARIATES)
    manual = m_cont.density_ratio_weights_manual(df, "grant", COVARIATES)
    max_abs_diff = float(np.max(np.abs(manual - weighted["ipw"].to_numpy())))
    weights_match = bool(np.allclose(manual, weighted["ipw"].to_numpy()))
    ipw = m_eff.weighted_effect(weighted, "grant", OUTCOME)

    results = f"""
Results (n = {n}, seed = {seed})
  Grant: mean = {df['grant'].mean():.2f}, sd = {df['grant'].std():.2f}
  Weights: mean = {weighted['ipw'].mean():.2f}, max = {weighted['ipw'].max():.2f}
  Manual vs scipy weights: max |difference| = {max_abs_diff:.2e}  (match = {weights_match})

  Naive slope                : {naive['estimate']:.3f}  (SE {naive['se']:.3f})
  Regression adjustment      : {adjusted['estimate']:.3f}  (SE {adjusted['se']:.3f})
  IPW slope                  : {ipw['estimate']:.3f}  (robust SE {ipw['se']:.3f})
  True effect per unit       : {TRUE_GRANT_EFFECT:g}
"""
    say(results)
    text += results

    fig_path = None
    if outdir:
        plots.apply_style()
        fig, axes = plt.subplots(1, 2, figsize=(11, 4.5))
        plots.plot_weights(axes[0], weighted["ipw"], title="A) Density-ratio weights")
        plots.plot_effects(axes[1], {
            "Naive": naive, "Regression": adjusted, "IPW": ipw,
        }, TRUE_GRANT_EFFECT, title="B) Effect of one unit of grant")
        fig.suptitle("Part 2: IPW with a continuous treatment", fontsize=14, y=1.03)
        fig.tight_layout()
        fig_path = plots.savefig(fig, outdir, "fig02_continuous.png")

    return dict(
        data=weighted, naive=naive, adjusted=adjusted, ipw=ipw,
        weights_match=weights_match, max_abs_diff=max_abs_diff,
        truth=TRUE_GRANT_EFFECT, sections=[(text, fig_path)],
    )


def inline_values(binary, continuous):
    """
    Numbers quoted in the blog post, keyed by placeholder name.
    """
    values = dict(
        n=len(binary["data"]),
        net_users=int(binary["data"]["net"].sum()),
        true_net_effect=binary["truth"],
        ate_naive=binary["naive"]["estimate"],
        ate_adjusted=binary["adjusted"]["estimate"],
        ate_binary=binary["ipw"]["estimate"],
        ate_binary_se=binary["ipw"]["se"],
        ate_binary_lo=binary["ipw"]["ci_lo"],
        ate_binary_hi=binary["ipw"]["ci_hi"],
        ate_stabilized=binary["ipw_stabilized"]["estimate"],
        smd_income=binary["balance"].loc["income", "smd"],
        smd_income_weighted=binary["balance"].loc["income", "smd_weighted"],
        true_grant_effect=continuous["truth"],
        grant_naive=continuous["naive"]["estimate"],
        grant_effect=continuous["ipw"]["estimate"],
        grant_effect_10=10 * continuous["ipw"]["estimate"],
        grant_weights_diff=continuous["max_abs_diff"],
    )
    if binary["bootstrap"] is not None:
        values.update(
            ate_boot_se=binary["bootstrap"]["se"],
            ate_boot_lo=binary["bootstrap"]["ci_lo"],
            ate_boot_hi=binary["bootstrap"]["ci_hi"],
        )
    return values


def _fill_post(path, values, outdir):
    page = load_page(path)
    filled = fill_values(page["body"], values)
    os.makedirs(outdir, exist_ok=True)
    out_path = os.path.join(outdir, f"{page['slug']}.md")
    with open(out_path, "w", encoding="utf-8") as fh:
        fh.write(filled)
    logger.info("filled %d inline values into %s", len(values), out_path)
    return out_path


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Inverse probability weighting tutorial -- binary and continuous treatments"
    )
    parser.add_argument("--n", type=int, default=DEFAULT_N,
                        help=f"simulated sample size (default: {DEFAULT_N})")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED,
                        help=f"random seed (default: {DEFAULT_SEED})")
    parser.add_argument("--n-boot", type=int, default=200,
                        help="bootstrap replications, 0 to skip (default: 200)")
    parser.add_argument("--outdir", default=DEFAULT_OUTDIR,
                        help=f"directory for figures and reports (default: {DEFAULT_OUTDIR})")
    parser.add_argument("--no-figures", action="store_true",
                        help="skip figures (and the PDF)")
    parser.add_argument("--pdf", action="store_true",
                        help="combine text and figures into a PDF report")
    parser.add_argument("--fill-post", metavar="PATH",
                        help="write a copy of the post at PATH with inline values filled in")
    parser.add_argument("--log-file", help="also write log messages to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)
    if args.fill_post and args.n_boot == 0:
        # the post quotes the bootstrap standard error
        parser.error("--fill-post needs --n-boot > 0")

    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    print("=" * 60)
    print("Inverse Probability Weighting -- Nets and Malaria")
    print("=" * 60)

    fig_dir = None if args.no_figures else args.outdir
    binary = run_binary(n=args.n, seed=args.seed, outdir=fig_dir, n_boot=args.n_boot)
    continuous = run_continuous(n=args.n, seed=args.seed, outdir=fig_dir)

    if args.pdf and fig_dir:
        from .report import build_pdf

        build_pdf(os.path.join(args.outdir, "ipw_tutorial.pdf"),
                  "INVERSE PROBABILITY WEIGHTING",
                  "Binary and continuous treatments, with simulated malaria data",
                  binary["sections"] + continuous["sections"])
    elif args.pdf:
        logger.warning("--pdf ignored because --no-figures was given")

    if args.fill_post:
        _fill_post(args.fill_post, inline_values(binary, continuous), args.outdir)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
