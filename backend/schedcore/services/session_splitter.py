SHORT_BLOCK_MINUTES = 60
LONG_BLOCK_MINUTES = 90
DOUBLE_BLOCK_MINUTES = 120


def split_into_sessions(remaining_minutes: int) -> list[int]:
    """Break a subject's remaining minutes into teachable block lengths.

    Rules, first match wins:

    * up to 60 minutes stays one block;
    * a multiple of 90 becomes 90-minute blocks;
    * a multiple of 120 becomes 120-minute blocks;
    * otherwise 60-minute blocks, with the last block absorbing a 60-90 minute
      remainder. A remainder between 90 and 120 cannot be cut into two blocks of
      at least an hour, so it is kept whole.

    The blocks always add up to ``remaining_minutes``. This is a fixed policy,
    it does not look for the fewest blocks.
    """
    if remaining_minutes < 0:
        raise ValueError("Remaining minutes cannot be negative")
    if remaining_minutes == 0:
        return []
    if remaining_minutes <= SHORT_BLOCK_MINUTES:
        return [remaining_minutes]
    if remaining_minutes % LONG_BLOCK_MINUTES == 0:
        return [LONG_BLOCK_MINUTES] * (remaining_minutes // LONG_BLOCK_MINUTES)
    if remaining_minutes % DOUBLE_BLOCK_MINUTES == 0:
        return [DOUBLE_BLOCK_MINUTES] * (remaining_minutes // DOUBLE_BLOCK_MINUTES)

    blocks: list[int] = []
    remaining = remaining_minutes
    while remaining > 0:
        if remaining < DOUBLE_BLOCK_MINUTES and remaining >= SHORT_BLOCK_MINUTES:
            blocks.append(remaining)
            break
        blocks.append(SHORT_BLOCK_MINUTES)
        remaining -= SHORT_BLOCK_MINUTES
    return blocks
