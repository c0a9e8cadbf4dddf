"""Pydantic v2 models for raylib project configuration.

Two views of the same information live here:

- :class:`ConfigEntry` -- one flat ``.rpc`` property, classified by its key
  into a category, a platform and a value type.
- :class:`ProjectConfigSchema` -- the typed, hierarchical project record the
  rest of the tool works with.

The codec in :mod:`rpcreator.project.codec` maps between them.
"""

from __future__ import annotations

import datetime
import re
from enum import Enum, IntEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

# Separates the items of list properties such as PROJECT_SOURCE_FILES.
LIST_SEPARATOR = ";"


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Category(str, Enum):
    """Top-level property category, taken from the first key segment."""
    PROJECT = "project"
    BUILD = "build"
    PLATFORM = "platform"
    DEPLOY = "deploy"
    IMAGERY = "imagery"
    ENGINE = "engine"


class Platform(str, Enum):
    """Target platform of a ``PLATFORM_*`` property."""
    WINDOWS = "windows"
    LINUX = "linux"
    MACOS = "macos"
    HTML5 = "html5"
    ANDROID = "android"
    DRM = "drm"
    SWITCH = "switch"
    DREAMCAST = "dreamcast"
    FREEBSD = "freebsd"
    ANY = "any"


class EntryType(str, Enum):
    """How a property value is interpreted and edited."""
    BOOL = "bool"
    INT_VALUE = "int"
    TEXT = "text"
    TEXT_FILE = "file"
    TEXT_PATH = "path"


class SourceTemplate(IntEnum):
    """Starting source code for a new project."""
    BASIC = 0
    SCREEN_MANAGER = 1
    CUSTOM = 2


class BuildSystem(IntEnum):
    """Build systems that can be generated. Values index ``requested_build_systems``."""
    SCRIPT = 0
    MAKEFILE = 1
    VSCODE = 2
    VS2022 = 3


# ---------------------------------------------------------------------------
# Entry values (tagged union)
# ---------------------------------------------------------------------------

class BoolValue(BaseModel):
    kind: Literal["bool"] = "bool"
    value: bool = False


class IntValue(BaseModel):
    kind: Literal["int"] = "int"
    value: int = 0


class TextValue(BaseModel):
    kind: Literal["text"] = "text"
    value: str = ""


class FileValue(BaseModel):
    """One or more file paths (``;``-separated when several)."""
    kind: Literal["file"] = "file"
    value: str = ""


class PathValue(BaseModel):
    """A directory path."""
    kind: Literal["path"] = "path"
    value: str = ""


EntryValue = Annotated[
    Union[BoolValue, IntValue, TextValue, FileValue, PathValue],
    Field(discriminator="kind"),
]

_VALUE_TYPES: dict[EntryType, type[BaseModel]] = {
    EntryType.BOOL: BoolValue,
    EntryType.INT_VALUE: IntValue,
    EntryType.TEXT: TextValue,
    EntryType.TEXT_FILE: FileValue,
    EntryType.TEXT_PATH: PathValue,
}


class ConfigEntry(BaseModel):
    """A classified ``.rpc`` property.

    ``category``, ``platform`` and ``type`` are derived from the key (and
    from whether the raw value was quoted); build instances with
    :meth:`from_raw` so they never disagree with the key.
    """
    key: str = Field(..., description="Property key, e.g. 'PROJECT_INTERNAL_NAME'")
    description: str = Field(default="", description="Tooltip/comment text")
    category: Category = Field(..., description="Category derived from the key")
    platform: Platform = Field(default=Platform.ANY, description="Platform derived from the key")
    type: EntryType = Field(..., description="Value type derived from the key")
    value: EntryValue = Field(..., description="Typed value")

    @classmethod
    def from_raw(cls, key: str, raw_value: int | str, description: str = "") -> "ConfigEntry":
        """Classify *key* and convert *raw_value* to the matching typed value.

        A quoted (``str``) value marks the entry as textual for the purpose
        of classification.

        Raises:
            UnknownCategoryError: If the key has no known category prefix.
            ValueError: If a boolean key holds non-numeric text.
        """
        from rpcreator.project.keys import classify_key

        quoted = isinstance(raw_value, str)
        key_class = classify_key(key, quoted)

        value: BaseModel
        if key_class.type is EntryType.BOOL:
            number = int(raw_value.strip()) if quoted else raw_value
            value = BoolValue(value=bool(number))
        elif key_class.type is EntryType.INT_VALUE:
            value = IntValue(value=int(raw_value))
        else:
            value = _VALUE_TYPES[key_class.type](value=str(raw_value))

        return cls(
            key=key,
            description=description,
            category=key_class.category,
            platform=key_class.platform,
            type=key_class.type,
            value=value,
        )

    @property
    def text(self) -> str:
        """The value in its textual form (``"1"``/``"0"`` for booleans)."""
        if isinstance(self.value, BoolValue):
            return "1" if self.value.value else "0"
        return str(self.value.value)

    @property
    def int_value(self) -> int:
        """The value as an integer; 0 for non-numeric text."""
        if isinstance(self.value, (BoolValue, IntValue)):
            return int(self.value.value)
        try:
            return int(self.value.value.strip())
        except ValueError:
            return 0

    @property
    def label(self) -> str:
        """Display name: key without its category (and platform) segment."""
        parts = self.key.split("_")
        skip = 2 if self.category is Category.PLATFORM and len(parts) > 2 else 1
        return " ".join(parts[skip:]) or self.key

    def to_raw(self) -> int | str:
        """Value as stored in a key/value file: int for bool/int, str otherwise."""
        if isinstance(self.value, (BoolValue, IntValue)):
            return int(self.value.value)
        return self.value.value


# ---------------------------------------------------------------------------
# Schema sections
# ---------------------------------------------------------------------------

class ProjectSection(BaseModel):
    """Project identity, required to generate the project structure."""

    model_config = ConfigDict(validate_assignment=True)

    commercial_name: str = Field(default="", description="Commercial name, used for docs and web")
    repo_name: str = Field(default="", description="Repository name, used for VCS")
    internal_name: str = Field(default="", description="Internal name, used for executable and project files")
    short_name: str = Field(default="", description="Short name, used for icons")
    year: int = Field(default=0, description="Project year")
    version: str = Field(default="", description="Project version")
    description: str = Field(default="", description="Project description")
    publisher_name: str = Field(default="", description="Publisher name")
    developer_name: str = Field(default="", description="Developer/company name")
    developer_url: str = Field(default="", description="Developer webpage")
    developer_email: str = Field(default="", description="Developer email")
    icon_file: str = Field(default="", description="Application icon file (.ico/.icns)")
    source_path: str = Field(default="", description="Source files directory")
    assets_path: str = Field(default="", description="Assets directory")
    assets_out_path: str = Field(default="", description="Assets output path on generation")
    source_file_paths: list[str] = Field(
        default_factory=list, description="Source files for the custom template"
    )
    asset_file_paths: list[str] = Field(
        default_factory=list, description="Asset files scanned from the assets path"
    )
    selected_template: SourceTemplate = Field(
        default=SourceTemplate.BASIC, description="Starting source template"
    )
    generation_out_path: str = Field(default=".", description="Generation output directory")

    @field_validator("source_file_paths", "asset_file_paths")
    @classmethod
    def _check_list_items(cls, paths: list[str]) -> list[str]:
        for path in paths:
            if not path or LIST_SEPARATOR in path:
                raise ValueError(f"invalid file path {path!r}: must be non-empty without '{LIST_SEPARATOR}'")
        return paths

    @computed_field  # type: ignore[misc]
    @property
    def output_name(self) -> str:
        """File/directory stem: internal name lower-cased, whitespace as ``_``."""
        return re.sub(r"\s+", "_", self.internal_name.strip()).lower()

    @computed_field  # type: ignore[misc]
    @property
    def resolved_repo_name(self) -> str:
        """Repository directory name; falls back to :attr:`output_name`."""
        return self.repo_name.strip() or self.output_name


class BuildSection(BaseModel):
    """Build properties shared by all platforms."""
    output_path: str = Field(default="", description="Build output path")
    assets_validation: bool = Field(default=False, description="Validate assets on building")
    assets_packaging: bool = Field(default=False, description="Package assets on building")
    rrp_packager_path: str = Field(default="", description="Path to the rrespacker tool")
    requested_build_systems: list[bool] = Field(
        default_factory=lambda: [True] * len(BuildSystem),
        description="Build systems to generate, indexed by BuildSystem",
    )
    target_platform: str = Field(default="", description="Target platform")
    target_architecture: str = Field(default="", description="Target architecture")
    target_mode: str = Field(default="", description="Target mode (DEBUG, RELEASE...)")

    def is_requested(self, system: BuildSystem) -> bool:
        index = int(system)
        return index < len(self.requested_build_systems) and bool(
            self.requested_build_systems[index]
        )

    def set_requested(self, system: BuildSystem, requested: bool) -> None:
        while len(self.requested_build_systems) <= int(system):
            self.requested_build_systems.append(False)
        self.requested_build_systems[int(system)] = requested


class WindowsPlatform(BaseModel):
    msbuild_path: str = Field(default="", description="Path to MSBuild")
    w64devkit_path: str = Field(default="", description="Path to w64devkit (GCC)")
    signtool_path: str = Field(default="", description="Path to signtool")
    sign_cert_file: str = Field(default="", description="Executable signing certificate")


class LinuxPlatform(BaseModel):
    use_cross_compiler: bool = Field(default=False, description="Use a cross-compiler")
    cross_compiler_path: str = Field(default="", description="Path to the cross-compiler")


class MacOSPlatform(BaseModel):
    bundle_info_file: str = Field(default="", description="Path to Info.plist")
    bundle_name: str = Field(default="", description="Bundle product name")
    bundle_version: str = Field(default="", description="Bundle version")
    bundle_icon_file: str = Field(default="", description="Bundle icon file (.icns)")


class HTML5Platform(BaseModel):
    emsdk_path: str = Field(default="", description="Path to emsdk")
    shell_file: str = Field(default="", description="Emscripten shell file")
    heap_memory_size: int = Field(default=0, description="Heap memory size in MB")
    use_asyncify: bool = Field(default=False, description="Build with ASYNCIFY")
    use_webgl2: bool = Field(default=False, description="Use WebGL2 instead of WebGL1")


class AndroidPlatform(BaseModel):
    sdk_path: str = Field(default="", description="Path to Android SDK")
    ndk_path: str = Field(default="", description="Path to Android NDK")
    java_sdk_path: str = Field(default="", description="Path to Java SDK")
    manifest_file: str = Field(default="", description="Android manifest file")
    min_sdk_version: int = Field(default=0, description="Minimum SDK version")
    target_sdk_version: int = Field(default=0, description="Target SDK version")


class DRMPlatform(BaseModel):
    use_cross_compiler: bool = Field(default=False, description="Use a cross-compiler")
    cross_compiler_path: str = Field(default="", description="Path to the cross-compiler")


class SwitchPlatform(BaseModel):
    """No Switch-specific properties are defined yet."""


class DreamcastPlatform(BaseModel):
    sdk_path: str = Field(default="", description="Path to KallistiOS")


class FreeBSDPlatform(BaseModel):
    """No FreeBSD-specific properties are defined yet."""


class PlatformSection(BaseModel):
    """Per-OS tool paths and flags."""
    windows: WindowsPlatform = Field(default_factory=WindowsPlatform)
    linux: LinuxPlatform = Field(default_factory=LinuxPlatform)
    macos: MacOSPlatform = Field(default_factory=MacOSPlatform)
    html5: HTML5Platform = Field(default_factory=HTML5Platform)
    android: AndroidPlatform = Field(default_factory=AndroidPlatform)
    drm: DRMPlatform = Field(default_factory=DRMPlatform)
    switch: SwitchPlatform = Field(default_factory=SwitchPlatform)
    dreamcast: DreamcastPlatform = Field(default_factory=DreamcastPlatform)
    freebsd: FreeBSDPlatform = Field(default_factory=FreeBSDPlatform)


class DeploySection(BaseModel):
    """Packaging and distribution options."""
    zip_package: bool = Field(default=False, description="Zip the package for distribution")
    rif_installer: bool = Field(default=False, description="Create an installer with rInstallFriendly")
    rif_installer_path: str = Field(default="", description="Path to rInstallFriendly")
    include_readme: bool = Field(default=False, description="Include README on package")
    readme_path: str = Field(default="", description="README file")
    include_eula: bool = Field(default=False, description="Include EULA on package")
    eula_path: str = Field(default="", description="EULA file")


class ImageTarget(BaseModel):
    """One image to export for stores and marketing."""
    name: str
    width: int
    height: int


DEFAULT_IMAGE_SET: tuple[tuple[str, int, int], ...] = (
    *((f"icon_{size}", size, size) for size in (256, 128, 96, 64, 48, 32, 24, 16, 184)),
    ("github_promo", 1280, 640),
    ("itchio_cover", 315, 250),
    ("itchio_promo", 450, 300),
    ("itchio_banner", 960, 210),
    ("twitter_card", 800, 418),
    ("steam_store_capsule_main", 616, 353),
    ("steam_store_capsule_header", 460, 215),
    ("steam_store_capsule_small", 231, 87),
    ("steam_store_capsule_vertical", 374, 448),
    ("steam_library_capsule", 600, 900),
    ("steam_library_logo", 1280, 720),
)


class ImagerySection(BaseModel):
    """Logo/splash sources and the image set generated from them."""
    logo_file: str = Field(default="", description="Logo image")
    splash_file: str = Field(default="", description="Splash image")
    generate_auto: bool = Field(default=False, description="Generate imagery automatically")
    image_set: list[ImageTarget] = Field(
        default_factory=lambda: [
            ImageTarget(name=name, width=width, height=height)
            for name, width, height in DEFAULT_IMAGE_SET
        ],
        description="Images to export",
    )


class EngineSection(BaseModel):
    """raylib library options."""
    src_path: str = Field(default="", description="raylib source code path")
    version: str = Field(default="", description="raylib version")
    gl_version: str = Field(default="", description="OpenGL version requested")


class ProjectConfigSchema(BaseModel):
    """Complete typed project configuration."""
    project: ProjectSection = Field(default_factory=ProjectSection)
    build: BuildSection = Field(default_factory=BuildSection)
    platform: PlatformSection = Field(default_factory=PlatformSection)
    deploy: DeploySection = Field(default_factory=DeploySection)
    imagery: ImagerySection = Field(default_factory=ImagerySection)
    engine: EngineSection = Field(default_factory=EngineSection)


def default_schema() -> ProjectConfigSchema:
    """Return the configuration a new session starts with."""
    schema = ProjectConfigSchema()
    schema.project.internal_name = "cool_project"
    schema.project.commercial_name = "Cool Project"
    schema.project.short_name = "cool"
    schema.project.description = "my cool new project"
    schema.project.version = "1.0"
    schema.project.year = datetime.date.today().year
    schema.project.publisher_name = "raylibtech"
    schema.project.developer_name = "raylibtech"
    schema.project.developer_url = "www.raylibtech.com"
    schema.project.developer_email = "info@raylibtech.com"
    schema.project.generation_out_path = "."
    schema.build.output_path = "build"
    schema.platform.windows.w64devkit_path = "C:\\raylib\\w64devkit\\bin"
    schema.platform.html5.heap_memory_size = 128
    schema.engine.src_path = "C:\\raylib\\raylib\\src"
    schema.engine.version = "5.5"
    schema.engine.gl_version = "3.3"
    return schema
