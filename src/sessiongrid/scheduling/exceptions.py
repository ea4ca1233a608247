#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
class FormatError(Exception):
    """A time string or component is malformed or out of range."""


class NotFoundError(Exception):
    pass


class ExhaustedInputError(Exception):
    """A resource pool has no member to place in a session."""
