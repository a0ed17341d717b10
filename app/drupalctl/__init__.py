"""drupalctl - assemble a Drupal site codebase from versioned packages."""

__version__ = "0.4.0"
