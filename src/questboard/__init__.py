"""Reward-escrow quest board: post a funded quest, take it, complete it, get paid."""
