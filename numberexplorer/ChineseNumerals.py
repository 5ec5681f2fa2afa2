"""Chinese numeral labels for the values 0..100."""

DIGITS = ["零", "一", "二", "三", "四", "五", "六", "七", "八", "九"]
TEN = "十"
HUNDRED = "百"

MAX_LABEL_VALUE = 100


def compose_label(tens: int, ones: int) -> str:
    """Compose the label of a two-digit value from its tens and ones digits.

    Rules:
    - tens == 0: single digit word (零 for 0)
    - tens == 1: 十 followed by the ones word (十, 十一 .. 十九)
    - tens >= 2: tens word + 十, followed by the ones word unless ones == 0

    Args:
        tens: Tens digit, 0..9
        ones: Ones digit, 0..9

    Returns:
        Chinese label string
    """
    if not (0 <= tens <= 9 and 0 <= ones <= 9):
        raise ValueError(f"Digits out of range: tens={tens}, ones={ones}")

    if tens == 0:
        return DIGITS[ones]

    prefix = TEN if tens == 1 else DIGITS[tens] + TEN
    if ones == 0:
        return prefix
    return prefix + DIGITS[ones]


def chinese_label(value: int) -> str:
    """Return the Chinese numeral label for value.

    Args:
        value: Integer in 0..100

    Returns:
        Label such as "零", "十一", "二十三" or "一百"

    Raises:
        ValueError: value outside 0..100
    """
    if not 0 <= value <= MAX_LABEL_VALUE:
        raise ValueError(f"No Chinese label for {value}; supported range is 0..{MAX_LABEL_VALUE}")

    if value == MAX_LABEL_VALUE:
        return DIGITS[1] + HUNDRED
    return compose_label(value // 10, value % 10)
