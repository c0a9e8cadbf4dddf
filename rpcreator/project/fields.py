"""Known ``.rpc`` keys and where each one lives in :class:`ProjectConfigSchema`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional

from rpcreator.project.keys import KeyClass, classify_key
from rpcreator.project.models import (
    LIST_SEPARATOR,
    BuildSystem,
    EntryType,
    ProjectConfigSchema,
    SourceTemplate,
)

FieldKind = Literal["text", "int", "bool", "list"]


@dataclass(frozen=True)
class FieldSpec:
    """Mapping between one key and one schema attribute.

    ``path`` is a dotted attribute path from the schema root.  ``index``
    addresses one element of a list attribute (build-system request flags).
    ``aliases`` are alternative spellings accepted when parsing.
    """

    key: str
    path: str
    kind: FieldKind
    description: str
    aliases: tuple[str, ...] = ()
    index: Optional[int] = None
    converter: Callable[[int], Any] = int

    @property
    def quoted(self) -> bool:
        return self.kind in ("text", "list")

    @property
    def key_class(self) -> KeyClass:
        return classify_key(self.key, self.quoted)

    @property
    def entry_type(self) -> EntryType:
        return self.key_class.type

    def _resolve(self, schema: ProjectConfigSchema) -> tuple[Any, str]:
        *parents, attr = self.path.split(".")
        target: Any = schema
        for name in parents:
            target = getattr(target, name)
        return target, attr

    def read(self, schema: ProjectConfigSchema) -> int | str:
        """Return the schema value in its raw store form."""
        target, attr = self._resolve(schema)
        value = getattr(target, attr)
        if self.index is not None:
            value = value[self.index] if self.index < len(value) else False

        if self.kind == "bool":
            return int(bool(value))
        if self.kind == "int":
            return int(value)
        if self.kind == "list":
            return LIST_SEPARATOR.join(value)
        return str(value)

    def write(self, schema: ProjectConfigSchema, value: int | str) -> None:
        """Store a raw value into the schema.

        Raises:
            ValueError: If an integer field receives non-numeric text.
        """
        converted: Any
        if self.kind == "bool":
            converted = bool(int(value))
        elif self.kind == "int":
            converted = self.converter(int(value))
        elif self.kind == "list":
            converted = [part for part in str(value).split(LIST_SEPARATOR) if part]
        else:
            converted = str(value)

        target, attr = self._resolve(schema)
        if self.index is None:
            setattr(target, attr, converted)
            return
        sequence = getattr(target, attr)
        while len(sequence) <= self.index:
            sequence.append(False)
        sequence[self.index] = converted


def _text(key: str, path: str, description: str, *aliases: str) -> FieldSpec:
    return FieldSpec(key=key, path=path, kind="text", description=description, aliases=aliases)


def _flag(key: str, path: str, description: str, *aliases: str) -> FieldSpec:
    return FieldSpec(key=key, path=path, kind="bool", description=description, aliases=aliases)


def _int(key: str, path: str, description: str, converter: Callable[[int], Any] = int) -> FieldSpec:
    return FieldSpec(key=key, path=path, kind="int", description=description, converter=converter)


def _system(system: BuildSystem, description: str) -> FieldSpec:
    return FieldSpec(
        key=f"BUILD_FLAG_SYSTEM_{system.name}",
        path="build.requested_build_systems",
        kind="bool",
        description=description,
        index=int(system),
    )


FIELD_SPECS: tuple[FieldSpec, ...] = (
    # PROJECT
    _text("PROJECT_INTERNAL_NAME", "project.internal_name", "Project internal name, used for executable and project files"),
    _text("PROJECT_REPO_NAME", "project.repo_name", "Project repository name, used for VCS (GitHub, GitLab)"),
    _text("PROJECT_COMMERCIAL_NAME", "project.commercial_name", "Project commercial name, used for docs and web"),
    _text("PROJECT_SHORT_NAME", "project.short_name", "Project short name"),
    _int("PROJECT_YEAR", "project.year", "Project year"),
    _text("PROJECT_VERSION", "project.version", "Project version"),
    _text("PROJECT_DESCRIPTION", "project.description", "Project description"),
    _text("PROJECT_PUBLISHER_NAME", "project.publisher_name", "Project publisher name"),
    _text("PROJECT_DEVELOPER_NAME", "project.developer_name", "Project developer name"),
    _text("PROJECT_DEVELOPER_URL", "project.developer_url", "Project developer webpage url"),
    _text("PROJECT_DEVELOPER_EMAIL", "project.developer_email", "Project developer email"),
    _text("PROJECT_ICON_FILE", "project.icon_file", "Project icon file"),
    _text("PROJECT_SOURCE_PATH", "project.source_path", "Project source directory, including all required code files (C/C++)"),
    FieldSpec(
        key="PROJECT_SOURCE_FILES",
        path="project.source_file_paths",
        kind="list",
        description="Project source files, separated by ';'",
    ),
    _text("PROJECT_ASSETS_PATH", "project.assets_path", "Project assets directory, including all required assets"),
    _text("PROJECT_ASSETS_OUTPUT_PATH", "project.assets_out_path", "Project assets destination path"),
    _int("PROJECT_TEMPLATE_TYPE", "project.selected_template", "Project source template: 0-Basic, 1-Screen manager, 2-Custom", SourceTemplate),
    # BUILD
    _text("BUILD_OUTPUT_PATH", "build.output_path", "Build output path"),
    _text("BUILD_TARGET_PLATFORM", "build.target_platform", "Build target platform (Supported: Windows, Linux, macOS, Android, Web)"),
    _text("BUILD_TARGET_ARCHITECTURE", "build.target_architecture", "Build target architecture (Supported: x86-64, Win32, arm64)"),
    _text("BUILD_TARGET_MODE", "build.target_mode", "Build target mode (Supported: DEBUG, RELEASE, DEBUG_DLL, RELEASE_DLL)"),
    _flag("BUILD_FLAG_ASSETS_VALIDATION", "build.assets_validation", "Flag: request assets validation on building"),
    _flag("BUILD_FLAG_ASSETS_PACKAGING", "build.assets_packaging", "Flag: request assets packaging on building"),
    _text("BUILD_RRP_PACKAGER_PATH", "build.rrp_packager_path", "Path to [rrespacker] tool"),
    _system(BuildSystem.SCRIPT, "Flag: generate build scripts"),
    _system(BuildSystem.MAKEFILE, "Flag: generate Makefile"),
    _system(BuildSystem.VSCODE, "Flag: generate VSCode project"),
    _system(BuildSystem.VS2022, "Flag: generate VS2022 solution"),
    # PLATFORM
    _text("PLATFORM_WINDOWS_MSBUILD_PATH", "platform.windows.msbuild_path", "Path to MSBuild system, required to build VS2022 solution"),
    _text("PLATFORM_WINDOWS_W64DEVKIT_PATH", "platform.windows.w64devkit_path", "Path to w64devkit (GCC), required to use Makefile building"),
    _text("PLATFORM_WINDOWS_SIGNTOOL_PATH", "platform.windows.signtool_path", "Path to signtool in case program needs to be signed (certificate required)"),
    _text("PLATFORM_WINDOWS_SIGNCERT_FILE", "platform.windows.sign_cert_file", "Path to a valid signature certificate to sign executable"),
    _flag("PLATFORM_LINUX_FLAG_CROSS_COMPILE", "platform.linux.use_cross_compiler", "Flag: request cross-compiler usage"),
    _text("PLATFORM_LINUX_CROSS_COMPILER_PATH", "platform.linux.cross_compiler_path", "Path to GCC cross-compiler"),
    _text("PLATFORM_MACOS_BUNDLE_INFO_FILE", "platform.macos.bundle_info_file", "Path to macOS bundle options (Info.plist)"),
    _text("PLATFORM_MACOS_BUNDLE_NAME", "platform.macos.bundle_name", "Bundle name"),
    _text("PLATFORM_MACOS_BUNDLE_VERSION", "platform.macos.bundle_version", "Bundle version"),
    _text("PLATFORM_MACOS_BUNDLE_ICON_FILE", "platform.macos.bundle_icon_file", "Bundle icon file (.icns)"),
    _text("PLATFORM_HTML5_EMSDK_PATH", "platform.html5.emsdk_path", "Path to emsdk, required for Web building"),
    _text("PLATFORM_HTML5_SHELL_FILE", "platform.html5.shell_file", "Path to shell file to be used by emscripten"),
    _int("PLATFORM_HTML5_HEAP_MEMORY_SIZE", "platform.html5.heap_memory_size", "Required heap memory size in MB (required for assets loading)"),
    _flag("PLATFORM_HTML5_FLAG_USE_ASYNCIFY", "platform.html5.use_asyncify", "Flag: use ASYNCIFY mode on building", "PLATFORM_HTML5_FLAG_USE_ASINCIFY"),
    _flag("PLATFORM_HTML5_FLAG_USE_WEBGL2", "platform.html5.use_webgl2", "Flag: use WebGL2 (OpenGL ES 3.0) instead of default WebGL1 (OpenGL ES 2.0)"),
    _text("PLATFORM_ANDROID_SDK_PATH", "platform.android.sdk_path", "Path to Android SDK, required for Android App building and support tools"),
    _text("PLATFORM_ANDROID_NDK_PATH", "platform.android.ndk_path", "Path to Android NDK, required for C native building to Android"),
    _text("PLATFORM_ANDROID_JAVA_SDK_PATH", "platform.android.java_sdk_path", "Path to Java SDK, required for some tools"),
    _text("PLATFORM_ANDROID_MANIFEST_FILE", "platform.android.manifest_file", "Path to Android manifest, including build options"),
    _int("PLATFORM_ANDROID_MIN_SDK_VERSION", "platform.android.min_sdk_version", "Minimum SDK version required"),
    _int("PLATFORM_ANDROID_TARGET_SDK_VERSION", "platform.android.target_sdk_version", "Target SDK version"),
    _flag("PLATFORM_DRM_FLAG_CROSS_COMPILE", "platform.drm.use_cross_compiler", "Flag: request cross-compiler usage"),
    _text("PLATFORM_DRM_CROSS_COMPILER_PATH", "platform.drm.cross_compiler_path", "Path to DRM cross-compiler for target ABI"),
    _text("PLATFORM_DREAMCAST_SDK_PATH", "platform.dreamcast.sdk_path", "Path to Dreamcast SDK (KallistiOS), required for Dreamcast building"),
    # DEPLOY
    _flag("DEPLOY_FLAG_ZIP_PACKAGE", "deploy.zip_package", "Flag: request package to be zipped for distribution"),
    _flag("DEPLOY_FLAG_RIF_INSTALLER", "deploy.rif_installer", "Flag: request installer creation using rInstallFriendly tool"),
    _text("DEPLOY_RIF_INSTALLER_PATH", "deploy.rif_installer_path", "Path to [rInstallFriendly] tool"),
    _flag("DEPLOY_FLAG_INCLUDE_README", "deploy.include_readme", "Flag: include README file on package", "DEPLOY_FLAG_INCUDE_README"),
    _text("DEPLOY_README_FILE", "deploy.readme_path", "Project README document, contains product information"),
    _flag("DEPLOY_FLAG_INCLUDE_EULA", "deploy.include_eula", "Flag: include EULA file on package (vs LICENSE file for FOSS)", "DEPLOY_FLAG_INCUDE_EULA"),
    _text("DEPLOY_EULA_FILE", "deploy.eula_path", "Project End-User-License-Agreement"),
    # IMAGERY
    _text("IMAGERY_LOGO_FILE", "imagery.logo_file", "Project logo image, useful for imagery generation"),
    _text("IMAGERY_SPLASH_FILE", "imagery.splash_file", "Project splash image, useful for imagery generation"),
    _flag("IMAGERY_FLAG_GENERATE", "imagery.generate_auto", "Flag: request project imagery generation: Social Cards, itchio, Steam..."),
    # RAYLIB
    _text("RAYLIB_SRC_PATH", "engine.src_path", "Path to raylib source code, to be build for target platform"),
    _text("RAYLIB_VERSION", "engine.version", "raylib version used by the project"),
    _text("RAYLIB_OPENGL_VERSION", "engine.gl_version", "OpenGL version to be used by raylib, WARNING: Platform dependant!"),
)

FIELDS_BY_KEY: dict[str, FieldSpec] = {
    name: spec for spec in FIELD_SPECS for name in (spec.key, *spec.aliases)
}


def lookup(key: str) -> Optional[FieldSpec]:
    """Return the field mapped to *key* (or one of its aliases)."""
    return FIELDS_BY_KEY.get(key)
