#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
# ****************************************************************************************************************************************************
"""Risk scoring for spec changes.

The score is a weighted sum over the affected set, rounded half up and clamped
to 1-10:

    score = direct_weight     * (#high direct dependents)
          + indirect_weight   * (#medium direct dependents)
          + low_weight        * (#low direct dependents)
          + transitive_weight * (#transitive dependents)
          + api_bonus   (if any affected edge is an API dependency)
          + data_bonus  (if any affected edge is a data-model dependency)

A target nobody depends on has nothing at risk and scores 0.
"""

import math
import logging
from typing import Optional, Sequence

from lib.constants import (
    EDGE_API,
    EDGE_DATA,
    LEVEL_HIGH,
    LEVEL_LOW,
    LEVEL_MEDIUM,
    RISK_SCORE_MAX,
    RISK_SCORE_MIN,
)
from lib.impact_types import AffectedSpec, RiskAssessment
from lib.risk_policy import RiskPolicy, default_policy

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 rounding away from zero for positive values."""
    return int(math.floor(value + 0.5))


def get_impact_level(score: int, policy: Optional[RiskPolicy] = None) -> str:
    """Map a 0-10 risk score to low/medium/high.

    Args:
        score: Risk score
        policy: Risk policy providing the band limits (default: MEDIUM)

    Returns:
        Impact level string
    """
    policy = policy or default_policy()
    if score <= policy.low_max:
        return LEVEL_LOW
    if score <= policy.medium_max:
        return LEVEL_MEDIUM
    return LEVEL_HIGH


def compute_raw_score(affected_by: Sequence[AffectedSpec], transitive_affected: Sequence[AffectedSpec], policy: RiskPolicy) -> float:
    """Weighted sum before rounding and clamping."""
    level_weights = {
        LEVEL_HIGH: policy.direct_weight,
        LEVEL_MEDIUM: policy.indirect_weight,
        LEVEL_LOW: policy.low_weight,
    }

    score = sum(level_weights.get(spec.level, policy.low_weight) for spec in affected_by)
    score += policy.transitive_weight * len(transitive_affected)

    affected_types = {spec.type for spec in affected_by} | {spec.type for spec in transitive_affected}
    if EDGE_API in affected_types:
        score += policy.api_bonus
    if EDGE_DATA in affected_types:
        score += policy.data_bonus

    return score


def score_risk(
    affected_by: Sequence[AffectedSpec], transitive_affected: Sequence[AffectedSpec], policy: Optional[RiskPolicy] = None
) -> RiskAssessment:
    """Compute the risk of changing a spec from its affected set.

    Args:
        affected_by: Direct dependents with their impact level
        transitive_affected: Dependents reached through other dependents
        policy: Weights and level bands (default: MEDIUM sensitivity)

    Returns:
        RiskAssessment with score 0 for an empty affected set, otherwise 1-10
    """
    policy = policy or default_policy()

    if not affected_by and not transitive_affected:
        return RiskAssessment(score=0, level=LEVEL_LOW)

    raw = compute_raw_score(affected_by, transitive_affected, policy)
    score = min(RISK_SCORE_MAX, max(RISK_SCORE_MIN, round_half_up(raw)))

    logger.debug("Risk raw score %.2f -> %s", raw, score)
    return RiskAssessment(score=score, level=get_impact_level(score, policy))
