import pytest

from tdlab.common.plotting import save_reward_curves


def test_save_reward_curves_writes_an_image(tmp_path) -> None:
    """
    The figure is written (parent directories included) and its path returned.
    """
    out = save_reward_curves(
        curves=[[-100.0, -50.0, -20.0], [-30.0, -25.0, -15.0]],
        labels=["q_learning", "sarsa"],
        out_path=tmp_path / "plots" / "rewards.png",
        smooth_window=2,
    )
    assert out.exists()
    assert out.stat().st_size > 0


def test_save_reward_curves_checks_labels(tmp_path) -> None:
    with pytest.raises(ValueError):
        save_reward_curves(curves=[[1.0]], labels=["a", "b"], out_path=tmp_path / "x.png")
