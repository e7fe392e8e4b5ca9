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
"""Risk policy configuration for impact scoring.

This module provides type-safe configuration of the weights used when turning
a set of affected specs into a risk score. Supports three sensitivity levels:

- LOW: Most permissive (large changes needed before risk climbs)
- MEDIUM: Balanced (default)
- HIGH: Most strict (small affected sets already score as risky)

Example usage:
    from lib.risk_policy import SensitivityLevel, RiskPolicy

    policy = RiskPolicy.for_sensitivity(SensitivityLevel.MEDIUM)
    assessment = score_risk(result.affected_by, result.transitive_affected, policy)
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict

from lib.constants import RISK_LEVEL_LOW_MAX, RISK_LEVEL_MEDIUM_MAX


class SensitivityLevel(Enum):
    """Risk sensitivity levels.

    Controls how quickly the risk score climbs for a given affected set:
    - LOW: Conservative scoring (only wide impact is flagged)
    - MEDIUM: Balanced scoring (default, a single hard dependent reaches "medium")
    - HIGH: Aggressive scoring (flags borderline changes)
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class RiskPolicy:
    """Type-safe weights and bands for risk scoring.

    Immutable configuration object. Create instances using the factory method
    for_sensitivity() rather than directly constructing.

    Attributes:
        direct_weight: Contribution of each high-level direct dependent
        indirect_weight: Contribution of each medium-level direct dependent
        low_weight: Contribution of each low-level direct dependent
        transitive_weight: Contribution of each transitive dependent
        api_bonus: Flat bonus when any affected edge is an API dependency
        data_bonus: Flat bonus when any affected edge is a data-model dependency
        low_max: Highest score still reported as "low"
        medium_max: Highest score still reported as "medium"
    """

    direct_weight: float
    indirect_weight: float
    low_weight: float
    transitive_weight: float
    api_bonus: float
    data_bonus: float
    low_max: int = RISK_LEVEL_LOW_MAX
    medium_max: int = RISK_LEVEL_MEDIUM_MAX

    def __post_init__(self) -> None:
        """Validate weights are non-negative and the level bands are ordered."""
        assert self.direct_weight > 0, "direct_weight must be positive"
        assert self.indirect_weight >= 0, "indirect_weight must be non-negative"
        assert self.low_weight >= 0, "low_weight must be non-negative"
        assert self.transitive_weight >= 0, "transitive_weight must be non-negative"
        assert self.api_bonus >= 0, "api_bonus must be non-negative"
        assert self.data_bonus >= 0, "data_bonus must be non-negative"

        # Levels must be monotonic over the score range
        assert 0 <= self.low_max < self.medium_max < 10, "level bands must satisfy 0 <= low_max < medium_max < 10"
        assert self.direct_weight >= self.indirect_weight >= self.low_weight, "weights must not increase as impact level decreases"

    def to_dict(self) -> Dict[str, float]:
        """Return the policy as a plain dictionary."""
        return asdict(self)

    @staticmethod
    def for_sensitivity(level: SensitivityLevel) -> "RiskPolicy":
        """Factory method to create a RiskPolicy for a given sensitivity level.

        Args:
            level: Desired sensitivity level (LOW, MEDIUM, or HIGH)

        Returns:
            Immutable RiskPolicy instance with appropriate weights

        Example:
            >>> RiskPolicy.for_sensitivity(SensitivityLevel.MEDIUM).direct_weight
            4.0
        """
        if level == SensitivityLevel.LOW:
            return RiskPolicy(
                direct_weight=2.0,
                indirect_weight=1.0,
                low_weight=0.5,
                transitive_weight=0.2,
                api_bonus=2.0,
                data_bonus=1.0,
            )
        elif level == SensitivityLevel.HIGH:
            return RiskPolicy(
                direct_weight=5.0,
                indirect_weight=3.0,
                low_weight=1.0,
                transitive_weight=0.5,
                api_bonus=3.0,
                data_bonus=2.0,
            )
        else:  # SensitivityLevel.MEDIUM (default)
            return RiskPolicy(
                direct_weight=4.0,
                indirect_weight=2.0,
                low_weight=0.5,
                transitive_weight=0.3,
                api_bonus=3.0,
                data_bonus=2.0,
            )


def default_policy() -> RiskPolicy:
    """Return the balanced (MEDIUM) risk policy."""
    return RiskPolicy.for_sensitivity(SensitivityLevel.MEDIUM)
