from enum import Enum
from typing import Union


class Theme(Enum):
    LIGHT = "light"
    DARK = "dark"


class UIStore:
    """界面主题：默认浅色，可以切换或直接指定。"""

    def __init__(self, theme: Theme = Theme.LIGHT):
        self.theme = theme

    def toggle_theme(self) -> Theme:
        self.theme = Theme.DARK if self.theme is Theme.LIGHT else Theme.LIGHT
        return self.theme

    def set_theme(self, theme: Union[Theme, str]) -> None:
        self.theme = Theme(theme)
