"""
ASCII plotting for weight progress visualization.

Creates terminal-friendly plots of an exercise's prescribed weight across
the sessions of a program.
"""

from .models import ChartDataPoint


def create_weight_plot(
    points: list[ChartDataPoint],
    width: int = 60,
    height: int = 20,
    exercise_name: str = "",
) -> str:
    """
    Create an ASCII plot of weight over workouts.

    Marked sessions are drawn as ● (success) or ✗ (fail); unmarked
    (projected) sessions as ·.

    Args:
        points: Series from extract_chart_data
        width: Plot width in characters
        height: Plot height in lines
        exercise_name: Display name shown in chart title

    Returns:
        ASCII art string
    """
    weighted = [p for p in points if p.weight > 0]
    if not weighted:
        return "No weighted sessions to plot."

    min_workout = weighted[0].workout
    max_workout = weighted[-1].workout
    workout_range = max_workout - min_workout
    if workout_range == 0:
        workout_range = 1

    min_weight = min(p.weight for p in weighted)
    max_weight = max(p.weight for p in weighted)
    y_min = max(0.0, min_weight - 2.5)
    y_max = max_weight + 2.5
    y_range = y_max - y_min
    if y_range == 0:
        y_range = 1.0

    plot_width = width - 8  # Leave room for y-axis labels
    plot_height = height - 3  # Leave room for x-axis and title

    grid = [[" " for _ in range(plot_width)] for _ in range(plot_height)]

    plot_points: list[tuple[int, int, ChartDataPoint]] = []
    for p in weighted:
        x = int(((p.workout - min_workout) / workout_range) * (plot_width - 1))
        y = int(((p.weight - y_min) / y_range) * (plot_height - 1))
        y = plot_height - 1 - y  # Flip y-axis
        plot_points.append((x, y, p))

    def _put(r: int, x: int, ch: str) -> None:
        if 0 <= x < plot_width and 0 <= r < plot_height and grid[r][x] == " ":
            grid[r][x] = ch

    # Step connectors: flat, then a vertical riser halfway to the next point
    for (x1, y1, _), (x2, y2, _) in zip(plot_points, plot_points[1:]):
        if y1 == y2:
            for x in range(x1 + 1, x2):
                _put(y1, x, "─")
            continue

        mid = (x1 + x2) // 2
        rising = y2 < y1
        for x in range(x1 + 1, mid):
            _put(y1, x, "─")
        for x in range(mid + 1, x2):
            _put(y2, x, "─")
        for r in range(min(y1, y2) + 1, max(y1, y2)):
            _put(r, mid, "│")
        if mid not in (x1, x2):
            _put(y1, mid, "╯" if rising else "╮")
            _put(y2, mid, "╭" if rising else "╰")

    # Data points overwrite line characters
    for x, y, p in plot_points:
        if p.result == "success":
            grid[y][x] = "●"
        elif p.result == "fail":
            grid[y][x] = "✗"
        else:
            grid[y][x] = "·"

    lines = []
    title = f"Weight Progress ({exercise_name})" if exercise_name else "Weight Progress"
    lines.append(title)
    lines.append("─" * width)

    for i, row in enumerate(grid):
        y_val = y_max - (i / (plot_height - 1)) * y_range if plot_height > 1 else y_max
        lines.append(f"{y_val:6.1f} ┤" + "".join(row))

    lines.append("─" * width)

    label_line = [" "] * plot_width
    labels_to_show = [
        (0, min_workout),
        (plot_width // 2, (min_workout + max_workout) // 2),
        (plot_width - 6, max_workout),
    ]
    for x_pos, workout in labels_to_show:
        text = f"#{workout}"
        for i, c in enumerate(text):
            if 0 <= x_pos + i < plot_width:
                label_line[x_pos + i] = c
    lines.append("        " + "".join(label_line))
    lines.append("● success   ✗ fail   · not marked")

    return "\n".join(lines)


def create_simple_bar_chart(
    labels: list[str],
    values: list[float],
    width: int = 40,
    title: str = "",
) -> str:
    """
    Horizontal bars scaled to the largest absolute value.

    Negative values (weight lost) are drawn with ░ instead of █.
    """
    if not values:
        return "No data to display."

    scale = max(abs(v) for v in values) or 1.0
    pad = max(len(label) for label in labels)

    lines = []
    if title:
        lines += [title, "─" * (pad + width + 9)]

    for label, value in zip(labels, values):
        glyph = "█" if value >= 0 else "░"
        bar = glyph * int(abs(value) / scale * width)
        lines.append(f"{label.rjust(pad)} │{bar} {value:+.1f}")

    return "\n".join(lines)
