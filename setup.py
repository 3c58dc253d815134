from setuptools import setup

setup(name='brewcalc',
      version='0.1',
      description='Homebrew recipe calculators',
      long_description=open('README.md').read(),
      keywords=['homebrew', 'beer'],
      license='Apache 2.0',
      packages=['brewcalc'],
      classifiers=[
          "Development Status :: 3 - Alpha",
          "Environment :: Console",
          "Topic :: Utilities",
          "License :: OSI Approved :: Apache Software License"
      ],
      install_requires=[
          "unit_parser",
          "numpy",
          "scipy"
      ],
      extras_require={
          'test': ['pytest']
      },
      include_package_data=True,
      package_data={
          'brewcalc': ['resources/*']
      },
      entry_points={
          'console_scripts': [
              'malt_composition=brewcalc.malt_composition:main',
              'water_composition=brewcalc.water_composition:main',
              'hop_composition=brewcalc.hop_composition:main',
              'yeast_composition=brewcalc.yeast_composition:main',
              'abvcalc=brewcalc.yeast_composition:abvcalc_main',
              'yeast_starter=brewcalc.yeast_starter:main',
              'brew_day=brewcalc.brew_day:main',
              'carbonation=brewcalc.carbonation:main',
              'recipe_calc=brewcalc.recipe_calc:main'
          ]
      },
      zip_safe=False)
