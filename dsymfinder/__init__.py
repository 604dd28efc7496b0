"""
dsymfinder: Locate DWARF debug symbols in Xcode build archives.

dsymfinder indexes a folder of historical Xcode archives so you can:
- Find the dSYM DWARF binary for an app or framework by name and version
- Look up the main app by bundle identifier as well as binary name
- Fall back to version-only matches for archives without a build number

Usage:
    from dsymfinder.core import DwarfLocator

    locator = DwarfLocator("~/Library/Developer/Xcode/Archives")
    dwarf_path = locator.lookup("com.example.myapp", "1.2", "7")
"""

__version__ = "0.1.0"
