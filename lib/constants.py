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
"""Shared constants for specCheck tools.

This module provides centralized constants used across the specCheck tools
to ensure consistency and make it easy to adjust thresholds and defaults.
"""

# =============================================================================
# Exit Codes
# =============================================================================

EXIT_SUCCESS = 0
EXIT_INVALID_ARGS = 1
EXIT_RUNTIME_ERROR = 2
EXIT_RISK_THRESHOLD = 3  # --fail-on-risk threshold reached
EXIT_KEYBOARD_INTERRUPT = 130

# =============================================================================
# Document Store Constants
# =============================================================================

SPEC_FILE_SUFFIX = ".md"
SPEC_FILE_STEM = "spec"  # <id>/spec.md collapses to <id>
IGNORED_DOCUMENTS = {"AGENTS.md"}
FRONTMATTER_DELIMITER = "---"

# Values of the 'depends' header field that mean "no explicit dependency"
NO_DEPENDENCY_SENTINELS = {"", "null", "none", "~"}

# =============================================================================
# Dependency Types and Impact Levels
# =============================================================================

EDGE_EXPLICIT = "explicit"  # frontmatter 'depends' declaration
EDGE_API = "api"  # API contract dependency
EDGE_DATA = "data"  # shared data model
EDGE_REFERENCE = "reference"  # in-body mention
EDGE_TYPES = (EDGE_EXPLICIT, EDGE_API, EDGE_DATA, EDGE_REFERENCE)

LEVEL_LOW = "low"
LEVEL_MEDIUM = "medium"
LEVEL_HIGH = "high"
IMPACT_LEVELS = (LEVEL_LOW, LEVEL_MEDIUM, LEVEL_HIGH)

# =============================================================================
# Impact Analysis Constants
# =============================================================================

MAX_TRANSITIVE_DEPTH = 5  # Transitive dependents further away are not reported
TRANSITIVE_PROPOSAL_THRESHOLD = 3  # More transitive dependents than this -> formal proposal

# Risk score range and level bands (score <= LOW_MAX -> low, <= MEDIUM_MAX -> medium)
RISK_SCORE_MIN = 1
RISK_SCORE_MAX = 10
RISK_LEVEL_LOW_MAX = 3
RISK_LEVEL_MEDIUM_MAX = 6

# =============================================================================
# Simulation Constants
# =============================================================================

SIMULATION_RISK_DELTA_WARNING = 2  # Warn when risk rises by more than this
SIMULATION_NEWLY_AFFECTED_WARNING = 3  # Warn when more specs than this become affected

# =============================================================================
# Project Health Constants
# =============================================================================

HEALTH_SCORE_MAX = 100
HEALTH_ORPHAN_PENALTY = 20  # Scaled by orphan ratio
HEALTH_CYCLE_PENALTY = 10  # Per detected cycle
HEALTH_SPARSE_PENALTY = 10  # Applied when average degree is too low
HEALTH_SPARSE_MIN_NODES = 2  # Sparse penalty only for graphs larger than this
HEALTH_MIN_AVERAGE_DEGREE = 0.5

HEALTH_GOOD_THRESHOLD = 80
HEALTH_MODERATE_THRESHOLD = 60

DEFAULT_TOP_N = 5  # Default number of most-connected specs to report

# =============================================================================
# Display Limits
# =============================================================================

MAX_SPECS_DISPLAY = 50  # Maximum specs to show in listings
MAX_CYCLES_DISPLAY = 20  # Maximum cycles to display

# =============================================================================
# Graph Export Constants
# =============================================================================

SUPPORTED_GRAPH_FORMATS = [".graphml", ".dot", ".gexf", ".json", ".mmd"]

# =============================================================================
# Color Severity Mapping
# =============================================================================

# These map to Colors class attributes in color_utils.py
COLOR_HIGH = "RED"
COLOR_MEDIUM = "YELLOW"
COLOR_LOW = "GREEN"
COLOR_INFO = "CYAN"

# =============================================================================
# Exception Classes
# =============================================================================


class SpecCheckError(Exception):
    """Base exception for all specCheck errors.

    All specCheck exceptions carry an exit_code attribute that indicates
    what exit code the program should use when this error is caught at the
    main entry point.
    """

    def __init__(self, message: str, exit_code: int = EXIT_RUNTIME_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


# Validation errors (EXIT_INVALID_ARGS)
class ValidationError(SpecCheckError):
    """Raised when input validation fails (arguments, paths, ids)."""

    def __init__(self, message: str):
        super().__init__(message, EXIT_INVALID_ARGS)


class DocumentRootError(ValidationError):
    """Raised when the specification root is missing or unreadable."""


class SpecNotFoundError(ValidationError):
    """Raised when a requested spec id has no node in the graph."""

    def __init__(self, spec_id: str):
        super().__init__(f"Spec not found: {spec_id}")
        self.spec_id = spec_id


class ProposalNotFoundError(ValidationError):
    """Raised when a change proposal file does not exist."""


# Analysis/processing errors (EXIT_RUNTIME_ERROR)
class AnalysisError(SpecCheckError):
    """Raised when analysis or processing operations fail."""


class GraphBuildError(AnalysisError):
    """Raised when dependency graph construction fails."""


class SimulationError(AnalysisError):
    """Raised when a what-if simulation cannot be carried out."""
