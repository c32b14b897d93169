from PyQt6 import QtGui, QtWidgets

THEMES = ("light", "dark")


def theme_palette(name: str) -> dict[str, str]:
    if name == "dark":
        return {
            "window": "#14171A",
            "base": "#1C2024",
            "base_alt": "#23282D",
            "header": "#262B30",
            "text": "#E4E6E8",
            "muted": "#9AA3AB",
            "grid": "#30363C",
            "accent": "#3FA36B",
            "accent_text": "#0F1311",
        }
    return {
        "window": "#F4F6F5",
        "base": "#FFFFFF",
        "base_alt": "#F7F9F8",
        "header": "#ECEFEE",
        "text": "#1B1F1D",
        "muted": "#5E6662",
        "grid": "#D5DBD8",
        "accent": "#217346",
        "accent_text": "#FFFFFF",
    }


def apply_theme(app: QtWidgets.QApplication, name: str) -> None:
    app.setStyle("Fusion")
    colors = theme_palette(name)
    palette = QtGui.QPalette()
    roles = {
        QtGui.QPalette.ColorRole.Window: "window",
        QtGui.QPalette.ColorRole.WindowText: "text",
        QtGui.QPalette.ColorRole.Base: "base",
        QtGui.QPalette.ColorRole.AlternateBase: "base_alt",
        QtGui.QPalette.ColorRole.Text: "text",
        QtGui.QPalette.ColorRole.Button: "header",
        QtGui.QPalette.ColorRole.ButtonText: "text",
        QtGui.QPalette.ColorRole.Highlight: "accent",
        QtGui.QPalette.ColorRole.HighlightedText: "accent_text",
    }
    for role, key in roles.items():
        palette.setColor(role, QtGui.QColor(colors[key]))
    app.setPalette(palette)

    app.setStyleSheet(
        f"""
        QTableView {{
            background: {colors['base']};
            alternate-background-color: {colors['base_alt']};
            gridline-color: {colors['grid']};
            selection-background-color: {colors['accent']};
            selection-color: {colors['accent_text']};
        }}
        QHeaderView::section {{
            background: {colors['header']};
            color: {colors['muted']};
            border: 1px solid {colors['grid']};
            padding: 2px 6px;
        }}
        QLineEdit, QListWidget {{
            background: {colors['base']};
            color: {colors['text']};
            border: 1px solid {colors['grid']};
            border-radius: 4px;
            padding: 4px 6px;
        }}
        QToolBar {{
            background: {colors['window']};
            border-bottom: 1px solid {colors['grid']};
        }}
        QStatusBar {{
            background: {colors['window']};
            color: {colors['muted']};
        }}
        """
    )
