"""
Setup script for Network Tool.

Usage:
    pip install -e .[test]        # development install
    python setup.py py2app        # macOS menu bar bundle (needs py2app)

The py2app bundle ends up in the 'dist' folder.
"""
import sys

from setuptools import setup

APP = ['network_tool.py']

OPTIONS = {
    'argv_emulation': False,
    'plist': {
        'CFBundleName': 'Network Tool',
        'CFBundleDisplayName': 'Network Tool',
        'CFBundleIdentifier': 'com.networktool.app',
        'CFBundleVersion': '1.0.0',
        'CFBundleShortVersionString': '1.0.0',
        'LSMinimumSystemVersion': '10.14.0',
        'LSUIElement': True,  # Hide dock icon (menu bar app)
        'NSHighResolutionCapable': True,
        'NSLocationWhenInUseUsageDescription': 'Network Tool needs location access to read the Wi-Fi network name on macOS 14+.',
    },
    'packages': [
        'monitor',
        'storage',
        'config',
        'app',
    ],
    'includes': [
        'rumps',
        'psutil',
        'PIL',
        'PIL.Image',
        'PIL.ImageDraw',
    ],
    'excludes': [
        'tkinter',
        'pytest',
        'pip',
    ],
    'site_packages': True,
}

bundle_kwargs = {}
if 'py2app' in sys.argv:
    bundle_kwargs = {
        'app': APP,
        'options': {'py2app': OPTIONS},
        'setup_requires': ['py2app'],
    }

setup(
    name='network-tool',
    version='1.0.0',
    description='Network adapter telemetry and internet kill switch',
    python_requires='>=3.8',
    packages=['app', 'app.views', 'config', 'monitor', 'storage'],
    py_modules=['network_tool'],
    install_requires=[
        'psutil>=5.9',
        'Pillow>=9.0',
        'rumps>=0.4.0; sys_platform == "darwin"',
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    entry_points={
        'console_scripts': ['network-tool=network_tool:main'],
    },
    **bundle_kwargs,
)
